from typing import Iterable, List, Optional

import numpy as np
import pandas as pd
import scipy.sparse as sp

from pmivec.model import Embeddings

# Querying trained vectors: nearest neighbours by inner product, the words that load most on
# each dimension, document vectors and analogies.


def l2_normalize(X: np.ndarray, axis: int = -1) -> np.ndarray:
    """L2-normalize array along the given axis (zero vectors get divisor 1).

    Args:
        X: Input array.
        axis: Axis along which to normalize. Defaults to -1.

    Returns:
        Normalized array, same shape as X.
    """
    norm = np.linalg.norm(X, axis=axis, keepdims=True)
    norm = np.where(norm > 0, norm, 1.0)
    return X / norm


def nearest_neighbors(
    embeddings: Embeddings,
    word: str,
    k: Optional[int] = None,
    normalize: bool = False,
) -> pd.DataFrame:
    """Rank every vocabulary word by its inner product with word's vector.

    The query word itself is included. Equal scores keep vocabulary order. By default the
    score is the raw inner product, so a word with a longer vector can outrank the query
    word itself. With normalize=True rows are L2-normalized first (cosine similarity), so
    the query word (if its vector is non-zero) scores 1 and ranks first.

    Args:
        embeddings: Trained vectors.
        word: Query word.
        k: Keep only the top k rows. Defaults to None (all words).
        normalize: Rank by cosine instead of raw inner product. Defaults to False.

    Returns:
        DataFrame with columns "item" and "value", sorted by descending value.

    Raises:
        KeyError: If word has no vector.
    """
    target = embeddings.vector(word)
    E = embeddings.vectors
    if normalize:
        E = l2_normalize(E, axis=1)
        target = E[embeddings.word2id[word]]
    scores = E @ target
    order = np.argsort(-scores, kind="stable")
    if k is not None:
        order = order[:k]
    return pd.DataFrame(
        {
            "item": [embeddings.id_to_word[j] for j in order],
            "value": scores[order],
        }
    )


def print_nearest(
    embeddings: Embeddings,
    query_words: Optional[List[str]] = None,
    k: int = 5,
    normalize: bool = False,
) -> None:
    """Print the k nearest neighbours (excluding the word itself) for each query word.

    Args:
        embeddings: Trained vectors.
        query_words: Words to query; if None, use the first 3 vocabulary words. Missing
            words are reported and skipped.
        k: Number of neighbours to show. Defaults to 5.
        normalize: Use cosine similarity. Defaults to False.
    """
    if query_words is None:
        query_words = embeddings.id_to_word[:3]
    for w in query_words:
        if w not in embeddings:
            print(f"  '{w}' -> (not in vocabulary)")
            continue
        nn = nearest_neighbors(embeddings, w, normalize=normalize)
        nn = nn[nn["item"] != w].head(k)
        nn_str = ", ".join(f"{item}({value:.3f})" for item, value in zip(nn["item"], nn["value"]))
        print(f"  '{w}' -> {nn_str}")


def top_words_per_dimension(
    embeddings: Embeddings,
    dimensions: Optional[Iterable[int]] = None,
    n: int = 10,
) -> pd.DataFrame:
    """The n words with the largest |value| in each dimension.

    Args:
        embeddings: Trained vectors.
        dimensions: 1-based dimensions to inspect. Defaults to None (all).
        n: Words per dimension. Defaults to 10.

    Returns:
        Tidy (item1, dimension, value) table ordered by dimension, then by |value| descending.
    """
    df = embeddings.to_frame()
    if dimensions is not None:
        df = df[df["dimension"].isin(list(dimensions))]
    df = df.assign(magnitude=df["value"].abs())
    df = df.sort_values(["dimension", "magnitude"], ascending=[True, False], kind="stable")
    top = df.groupby("dimension", sort=True).head(n)
    return top.drop(columns="magnitude").reset_index(drop=True)


def document_embeddings(
    tidy_tokens: pd.DataFrame,
    embeddings: Embeddings,
    id_col: str = "id",
    token_col: str = "token",
) -> pd.DataFrame:
    """Sum the vectors of each document's tokens (weighted by count).

    Tokens without a vector are ignored; a document with none gets a zero row.

    Args:
        tidy_tokens: One row per token occurrence, e.g. from corpus_utils.tokenize_documents.
        embeddings: Trained vectors.
        id_col: Document id column. Defaults to "id".
        token_col: Token column. Defaults to "token".

    Returns:
        DataFrame indexed by document id with columns 1..dim.
    """
    doc_codes, doc_ids = pd.factorize(tidy_tokens[id_col], sort=False)
    word_codes = tidy_tokens[token_col].map(embeddings.word2id)
    known = word_codes.notna().to_numpy()
    counts = sp.csr_matrix(
        (
            np.ones(int(known.sum())),
            (doc_codes[known], word_codes[known].astype(np.int64).to_numpy()),
        ),
        shape=(len(doc_ids), len(embeddings)),
    )
    doc_vectors = counts @ embeddings.vectors
    return pd.DataFrame(
        doc_vectors,
        index=pd.Index(doc_ids, name=id_col),
        columns=np.arange(1, embeddings.dim + 1),
    )


def analogy(
    embeddings: Embeddings,
    a: str,
    b: str,
    c: str,
    k: int = 1,
) -> Optional[List[str]]:
    """Solve "a is to b as c is to ?" via vector offset; return k nearest (excluding a, b, c).

    Args:
        embeddings: Trained vectors.
        a: First word of analogy.
        b: Second word.
        c: Third word.
        k: Number of nearest neighbours to return. Defaults to 1.

    Returns:
        List of k nearest word strings, or None if any of a, b, c not in vocab.
    """
    for w in (a, b, c):
        if w not in embeddings:
            return None
    ia, ib, ic = (embeddings.word2id[w] for w in (a, b, c))
    W = embeddings.vectors
    vec = (W[ia] - W[ib] + W[ic]).reshape(1, -1)
    E = l2_normalize(W, axis=1)
    sims = np.dot(E, l2_normalize(vec, axis=1).ravel())
    for idx in (ia, ib, ic):
        sims[idx] = -2.0
    nearest = np.argsort(-sims, kind="stable")[:k]
    return [embeddings.id_to_word[j] for j in nearest]
