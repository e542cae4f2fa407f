import logging
import time
from typing import List, NamedTuple

import pandas as pd
import scipy.sparse as sp

from pmivec.corpus_utils import token_sequences, tokenize_documents
from pmivec.data import window_documents
from pmivec.model import Embeddings, fit_embeddings
from pmivec.pmi import cooccurrence_counts, entries_to_frame, pmi_entries

# Pipeline driver: documents -> tokens -> windows -> PMI -> truncated SVD.

logger = logging.getLogger(__name__)


class PipelineResult(NamedTuple):
    """Everything the pipeline derived from one document collection.

    Attributes:
        embeddings: Word vectors (rows follow vocabulary).
        pmi: Tidy (item1, item2, pmi) table of co-occurring pairs.
        pmi_matrix: The same scores as a sparse (V, V) matrix.
        vocabulary: Words in matrix row order.
        windows: Tidy (window_id, token) table.
        tokens: Tidy (id, position, token) table.
    """

    embeddings: Embeddings
    pmi: pd.DataFrame
    pmi_matrix: sp.csr_matrix
    vocabulary: List[str]
    windows: pd.DataFrame
    tokens: pd.DataFrame


def train(
    docs: pd.DataFrame,
    *,
    unit: str = "words",
    window_size: int = 4,
    dim: int = 100,
    min_count: int = 1,
    stem: bool = False,
    n_jobs: int = 1,
    positive: bool = False,
    weight_singular_values: bool = False,
    solver: str = "auto",
    seed: int = 0,
    **tokenizer_options,
) -> PipelineResult:
    """Build word vectors for a document collection.

    Args:
        docs: Document table with "id" and "text".
        unit: Token unit for the tokenizer. Defaults to "words".
        window_size: Tokens per window. Defaults to 4.
        dim: Embedding dimensionality (clamped to vocabulary size - 1). Defaults to 100.
        min_count: Drop tokens rarer than this before windowing. Defaults to 1.
        stem: Stem tokens. Defaults to False.
        n_jobs: Worker processes for windowing. Defaults to 1.
        positive: Use positive PMI only. Defaults to False.
        weight_singular_values: Scale vectors by singular values. Defaults to False.
        solver: SVD solver ("auto", "arpack", "dense"). Defaults to "auto".
        seed: Seed for the SVD. Defaults to 0.
        **tokenizer_options: Passed to the tokenizer (lowercase, strip_punct, stopwords, n, ...).

    Returns:
        PipelineResult.

    Raises:
        ValueError: If no tokens, no complete windows or no co-occurring pairs remain.
    """
    t0 = time.time()
    tokens = tokenize_documents(
        docs, unit=unit, min_count=min_count, stem=stem, **tokenizer_options
    )
    if tokens.empty:
        raise ValueError("No tokens left after tokenization")

    windows = window_documents(token_sequences(tokens), window_size, n_jobs=n_jobs)
    if windows.empty:
        raise ValueError(f"No document has at least window_size={window_size} tokens")

    M, vocab = cooccurrence_counts(windows)
    rows, cols, values = pmi_entries(M, positive=positive)
    if len(values) == 0:
        raise ValueError("No word pairs co-occur; increase window_size")
    pmi_mat = sp.csr_matrix((values, (rows, cols)), shape=(len(vocab), len(vocab)))
    logger.info("PMI: %d scored pairs, vocabulary %d", len(values), len(vocab))

    embeddings = fit_embeddings(
        pmi_mat,
        vocab,
        dim=dim,
        weight_singular_values=weight_singular_values,
        solver=solver,
        seed=seed,
    )
    logger.info(
        "Trained %d x %d embeddings in %.2fs", len(embeddings), embeddings.dim, time.time() - t0
    )
    return PipelineResult(
        embeddings=embeddings,
        pmi=entries_to_frame(rows, cols, values, vocab),
        pmi_matrix=pmi_mat,
        vocabulary=vocab,
        windows=windows,
        tokens=tokens,
    )
