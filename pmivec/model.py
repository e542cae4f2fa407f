import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp
from scipy.sparse.linalg import svds

# Word vectors from a truncated SVD of the PMI matrix (ARPACK via SciPy, or dense LAPACK via
# NumPy for small inputs). Singular triplets come back sorted by decreasing singular value,
# with signs fixed so the largest-magnitude entry of each left vector is positive.

logger = logging.getLogger(__name__)

# Largest min(shape) that solver="auto" factorizes densely.
DENSE_MAX = 2000


class Embeddings:
    """Read-only word vectors plus the vocabulary that indexes them.

    Attributes:
        vectors (np.ndarray): Shape (V, dim); row i is the vector of id_to_word[i].
        id_to_word (List[str]): Vocabulary in row order.
        word2id (dict): Mapping word -> row index.
        singular_values (Optional[np.ndarray]): Singular values of the factorization, if any.
    """

    def __init__(
        self,
        vectors: np.ndarray,
        id_to_word: Sequence[str],
        singular_values: Optional[np.ndarray] = None,
    ):
        vectors = np.array(vectors, dtype=np.float64)
        if vectors.ndim != 2:
            raise ValueError(f"vectors must be 2-D, got shape {vectors.shape}")
        if len(id_to_word) != vectors.shape[0]:
            raise ValueError(f"{len(id_to_word)} words for {vectors.shape[0]} vectors")
        vectors.setflags(write=False)
        self.vectors = vectors
        self.id_to_word = list(id_to_word)
        self.word2id = {w: i for i, w in enumerate(self.id_to_word)}
        if len(self.word2id) != len(self.id_to_word):
            raise ValueError("Vocabulary contains duplicate words")
        self.singular_values = (
            None if singular_values is None else np.asarray(singular_values, dtype=np.float64)
        )

    @property
    def dim(self) -> int:
        return self.vectors.shape[1]

    def __len__(self) -> int:
        return len(self.id_to_word)

    def __contains__(self, word) -> bool:
        return word in self.word2id

    def vector(self, word: str) -> np.ndarray:
        """Vector of one word.

        Raises:
            KeyError: If word is not in the vocabulary.
        """
        if word not in self.word2id:
            raise KeyError(f"{word!r} is not in the vocabulary ({len(self)} words)")
        return self.vectors[self.word2id[word]]

    def to_frame(self) -> pd.DataFrame:
        """Tidy (item1, dimension, value) table; dimensions are numbered from 1."""
        V, D = self.vectors.shape
        return pd.DataFrame(
            {
                "item1": np.repeat(np.asarray(self.id_to_word, dtype=object), D),
                "dimension": np.tile(np.arange(1, D + 1), V),
                "value": self.vectors.ravel(),
            }
        )

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        item: str = "item1",
        dimension: str = "dimension",
        value: str = "value",
    ) -> "Embeddings":
        """Inverse of to_frame; words keep their order of first appearance, gaps become 0."""
        order = pd.unique(df[item])
        wide = df.pivot(index=item, columns=dimension, values=value)
        wide = wide.reindex(index=order, columns=sorted(wide.columns)).fillna(0.0)
        return cls(wide.to_numpy(dtype=np.float64), [str(w) for w in order])


def _flip_signs(U: np.ndarray, Vt: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    rows = np.argmax(np.abs(U), axis=0)
    signs = np.sign(U[rows, np.arange(U.shape[1])])
    signs[signs == 0] = 1.0
    return U * signs, Vt * signs[:, np.newaxis]


def truncated_svd(
    matrix,
    k: int,
    solver: str = "auto",
    seed: int = 0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Rank-k SVD: the best rank-k approximation of matrix is U @ diag(s) @ Vt.

    Args:
        matrix: Dense array or scipy sparse matrix, shape (m, n).
        k: Number of singular triplets; clamped to min(m, n), or min(m, n) - 1 for ARPACK.
        solver: "arpack" (scipy svds), "dense" (numpy svd) or "auto". Defaults to "auto".
        seed: Seed for the ARPACK starting vector. Defaults to 0.

    Returns:
        Tuple (U, s, Vt) with shapes (m, k), (k,), (k, n); s is non-increasing.

    Raises:
        ValueError: If k < 1, the matrix is empty, the solver is unknown, or ARPACK is
            asked to factorize a matrix with min(m, n) == 1.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    n = min(matrix.shape)
    if n == 0:
        raise ValueError(f"Cannot factorize an empty matrix of shape {matrix.shape}")
    if k > n:
        logger.info("Requested %d dimensions but matrix rank is at most %d; using %d", k, n, n)
        k = n
    if solver == "auto":
        solver = "dense" if (n <= DENSE_MAX or k >= n - 1) else "arpack"

    if solver == "dense":
        A = matrix.toarray() if sp.issparse(matrix) else np.asarray(matrix, dtype=np.float64)
        U, s, Vt = np.linalg.svd(A.astype(np.float64), full_matrices=False)
        U, s, Vt = U[:, :k], s[:k], Vt[:k]
    elif solver == "arpack":
        if n < 2:
            raise ValueError(f"arpack solver needs min(shape) >= 2, got shape {matrix.shape}")
        if k >= n:
            logger.info("ARPACK computes at most %d singular triplets; using %d", n - 1, n - 1)
            k = n - 1
        rng = np.random.default_rng(seed)
        v0 = rng.uniform(-1.0, 1.0, size=n)
        U, s, Vt = svds(sp.csr_matrix(matrix, dtype=np.float64), k=k, v0=v0)
        order = np.argsort(-s, kind="stable")
        U, s, Vt = U[:, order], s[order], Vt[order]
    else:
        raise ValueError(f"Unknown solver {solver!r}; expected 'auto', 'arpack' or 'dense'")
    U, Vt = _flip_signs(U, Vt)
    return U, s, Vt


def reconstruction_error(matrix, U: np.ndarray, s: np.ndarray, Vt: np.ndarray) -> float:
    """Frobenius norm of matrix - U diag(s) Vt."""
    A = matrix.toarray() if sp.issparse(matrix) else np.asarray(matrix, dtype=np.float64)
    return float(np.linalg.norm(A - (U * s) @ Vt))


def fit_embeddings(
    pmi: sp.spmatrix,
    id_to_word: Sequence[str],
    dim: int = 100,
    weight_singular_values: bool = False,
    solver: str = "auto",
    seed: int = 0,
) -> Embeddings:
    """Factorize a (V, V) PMI matrix into dim-dimensional word vectors.

    Row i of the result is the i-th left singular vector row, scaled by the singular
    values when weight_singular_values is True. At most V - 1 dimensions are kept: with
    all V the unweighted rows are orthonormal and every inner product between two
    different words is zero.

    Args:
        pmi: Sparse PMI matrix; rows follow id_to_word.
        id_to_word: Vocabulary in row order.
        dim: Requested dimensionality (clamped to V - 1). Defaults to 100.
        weight_singular_values: Multiply by the singular values. Defaults to False.
        solver: See truncated_svd. Defaults to "auto".
        seed: ARPACK seed. Defaults to 0.

    Returns:
        Embeddings with singular_values set.
    """
    if pmi.shape[0] != len(id_to_word):
        raise ValueError(f"PMI matrix has {pmi.shape[0]} rows for {len(id_to_word)} words")
    V = pmi.shape[0]
    if dim >= V > 1:
        logger.warning("Requested %d dimensions for %d words; using %d", dim, V, V - 1)
        dim = V - 1
    U, s, _ = truncated_svd(pmi, dim, solver=solver, seed=seed)
    vectors = U * s if weight_singular_values else U
    logger.info("Factorized %dx%d PMI matrix into %d dimensions", *pmi.shape, len(s))
    return Embeddings(vectors, id_to_word, singular_values=s)


def read_word_vectors(path: str, max_words: Optional[int] = None) -> Embeddings:
    """Load whitespace-separated "word v1 v2 ..." lines (GloVe text format).

    Args:
        path: Path to the text file.
        max_words: Stop after this many words. Defaults to None (all).

    Returns:
        Embeddings without singular values.

    Raises:
        ValueError: If lines disagree on the dimensionality or the file has no vectors.
    """
    words: List[str] = []
    rows: List[List[float]] = []
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            parts = line.rstrip().split(" ")
            if len(parts) < 2:
                continue
            vec = [float(x) for x in parts[1:]]
            if rows and len(vec) != len(rows[0]):
                raise ValueError(
                    f"{path}:{line_no}: expected {len(rows[0])} values, got {len(vec)}"
                )
            words.append(parts[0])
            rows.append(vec)
            if max_words is not None and len(words) >= max_words:
                break
    if not rows:
        raise ValueError(f"No word vectors in {path}")
    return Embeddings(np.array(rows), words)
