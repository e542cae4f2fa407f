import logging
from typing import List, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp

# Pointwise mutual information between words that share a window.
# With M the word-by-window count matrix and C = M M^T:
#   P(a, b) = C[a, b] / sum(C),  P(a) = rowsum(M)[a] / sum(M),
#   PMI(a, b) = log(P(a, b) / (P(a) P(b)))
# Only pairs with C[a, b] > 0 and a != b are scored; there is no smoothing.

logger = logging.getLogger(__name__)


def cooccurrence_counts(
    windows: pd.DataFrame,
    item: str = "token",
    feature: str = "window_id",
) -> Tuple[sp.csr_matrix, List[str]]:
    """Count how often each item appears in each feature (window).

    Args:
        windows: Tidy table with one row per (feature, item) occurrence.
        item: Column with the words. Defaults to "token".
        feature: Column with the window ids. Defaults to "window_id".

    Returns:
        Tuple (M, vocabulary): M is (V, n_windows) CSR with repeated occurrences summed;
        vocabulary lists the words in order of first appearance (row i of M).
    """
    word_codes, vocab = pd.factorize(windows[item], sort=False)
    window_codes, window_ids = pd.factorize(windows[feature], sort=False)
    data = np.ones(len(word_codes), dtype=np.float64)
    M = sp.csr_matrix(
        (data, (word_codes, window_codes)), shape=(len(vocab), len(window_ids))
    )
    return M, [str(w) for w in vocab]


def pmi_entries(
    word_by_window: sp.spmatrix,
    positive: bool = False,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """PMI for every off-diagonal co-occurring pair.

    Args:
        word_by_window: (V, n_windows) count matrix.
        positive: Keep only PMI > 0 (PPMI with zeros dropped). Defaults to False.

    Returns:
        Tuple (rows, cols, values), sorted by (row, col). Both (a, b) and (b, a) are present.

    Raises:
        ValueError: If the matrix has no counts.
    """
    M = sp.csr_matrix(word_by_window, dtype=np.float64)
    total_occurrences = M.sum()
    if total_occurrences <= 0:
        raise ValueError("No co-occurrence counts: the window table is empty")
    C = (M @ M.T).tocoo()
    total_pairs = C.sum()
    p_word = np.asarray(M.sum(axis=1)).ravel() / total_occurrences

    keep = (C.row != C.col) & (C.data > 0)
    rows, cols, joint = C.row[keep], C.col[keep], C.data[keep]
    values = np.log((joint / total_pairs) / (p_word[rows] * p_word[cols]))
    if positive:
        pos = values > 0
        rows, cols, values = rows[pos], cols[pos], values[pos]
    order = np.lexsort((cols, rows))
    return rows[order], cols[order], values[order]


def pmi_matrix(word_by_window: sp.spmatrix, positive: bool = False) -> sp.csr_matrix:
    """Sparse symmetric (V, V) PMI matrix; absent entries are pairs that never co-occur."""
    rows, cols, values = pmi_entries(word_by_window, positive=positive)
    V = word_by_window.shape[0]
    return sp.csr_matrix((values, (rows, cols)), shape=(V, V))


def entries_to_frame(
    rows: np.ndarray,
    cols: np.ndarray,
    values: np.ndarray,
    vocabulary: List[str],
) -> pd.DataFrame:
    """Tidy (item1, item2, pmi) table from matrix coordinates."""
    vocab = np.asarray(vocabulary, dtype=object)
    return pd.DataFrame({"item1": vocab[rows], "item2": vocab[cols], "pmi": values})


def pairwise_pmi(
    windows: pd.DataFrame,
    item: str = "token",
    feature: str = "window_id",
    positive: bool = False,
) -> pd.DataFrame:
    """PMI of every pair of items that share at least one feature.

    Args:
        windows: Tidy (feature, item) table, e.g. from data.window_documents.
        item: Column with the words. Defaults to "token".
        feature: Column with the window ids. Defaults to "window_id".
        positive: Drop non-positive scores. Defaults to False.

    Returns:
        DataFrame with columns item1, item2, pmi; one row per ordered pair.
    """
    M, vocab = cooccurrence_counts(windows, item=item, feature=feature)
    rows, cols, values = pmi_entries(M, positive=positive)
    logger.info("Scored %d word pairs over a vocabulary of %d", len(values), len(vocab))
    return entries_to_frame(rows, cols, values, vocab)
