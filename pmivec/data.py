import logging
from multiprocessing import Pool
from typing import Hashable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

import pandas as pd

# Windowing: every complete window of window_size consecutive tokens, per document.
# Windows shorter than window_size at the end of a sequence are never emitted, so a sequence
# of length L gives max(0, L - W + 1) windows. Documents are independent; a document whose
# windowing fails is logged and left out of the result.

logger = logging.getLogger(__name__)


class Window(NamedTuple):
    """A window of consecutive tokens and its identifier."""

    window_id: Union[int, str]
    tokens: Tuple[str, ...]


def sliding_windows(
    tokens: Sequence[str],
    window_size: int,
    prefix: Optional[Hashable] = None,
) -> List[Window]:
    """Every contiguous window of exactly window_size tokens.

    Args:
        tokens: Token sequence of one document.
        window_size: Number of tokens per window (W >= 1).
        prefix: If given, window ids are "<prefix>_<k>"; otherwise k. k starts at 1.

    Returns:
        List of Window in sequence order; empty if len(tokens) < window_size.

    Raises:
        ValueError: If window_size < 1.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    tokens = list(tokens)
    out = []
    for start in range(len(tokens) - window_size + 1):
        k = start + 1
        window_id = k if prefix is None else f"{prefix}_{k}"
        out.append(Window(window_id, tuple(tokens[start : start + window_size])))
    return out


def _document_windows(task):
    # Worker entry point: errors come back as the third element instead of being raised.
    doc_id, tokens, window_size = task
    try:
        return doc_id, sliding_windows(tokens, window_size, prefix=doc_id), None
    except Exception as e:
        return doc_id, None, f"{type(e).__name__}: {e}"


def window_documents(
    sequences: Mapping[Hashable, Sequence[str]],
    window_size: int,
    n_jobs: int = 1,
) -> pd.DataFrame:
    """Slide windows over every document and return a tidy (window_id, token) table.

    Args:
        sequences: Mapping document id -> token sequence.
        window_size: Tokens per window.
        n_jobs: Worker processes; 1 runs in-process. Defaults to 1.

    Returns:
        DataFrame with columns "window_id" ("<doc id>_<k>") and "token", one row per token
        per window, in document order.

    Raises:
        ValueError: If window_size < 1 (checked before any document is processed).
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    tasks = [(doc_id, tokens, window_size) for doc_id, tokens in sequences.items()]
    if n_jobs > 1 and len(tasks) > 1:
        chunksize = max(1, len(tasks) // (4 * n_jobs))
        with Pool(processes=n_jobs) as pool:
            results = pool.map(_document_windows, tasks, chunksize=chunksize)
    else:
        results = [_document_windows(t) for t in tasks]

    window_ids: List[str] = []
    window_tokens: List[str] = []
    n_windows = 0
    n_failed = 0
    for doc_id, windows, error in results:
        if error is not None:
            n_failed += 1
            logger.warning("Dropping document %r: windowing failed (%s)", doc_id, error)
            continue
        for w in windows:
            window_ids.extend([w.window_id] * len(w.tokens))
            window_tokens.extend(w.tokens)
        n_windows += len(windows)
    logger.info(
        "Built %d windows of size %d from %d documents (%d dropped)",
        n_windows,
        window_size,
        len(tasks) - n_failed,
        n_failed,
    )
    return pd.DataFrame({"window_id": window_ids, "token": window_tokens}, dtype=object)
