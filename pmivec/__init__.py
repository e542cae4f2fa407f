from pmivec.data import Window, sliding_windows, window_documents
from pmivec.eval import nearest_neighbors
from pmivec.model import Embeddings, fit_embeddings, truncated_svd
from pmivec.pmi import pairwise_pmi, pmi_matrix
from pmivec.train import train

# Count-based word vectors: windowed co-occurrence -> PMI -> truncated SVD.
# Tokenization is NLTK's; the factorization is SciPy/NumPy's.

__all__ = [
    "Embeddings",
    "Window",
    "fit_embeddings",
    "nearest_neighbors",
    "pairwise_pmi",
    "pmi_matrix",
    "sliding_windows",
    "train",
    "truncated_svd",
    "window_documents",
]
