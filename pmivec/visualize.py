import argparse
import json
import os

from pmivec.corpus_utils import DEMO_DOCUMENTS, documents_from_texts, load_documents
from pmivec.train import train

# Inspection figures: singular value spectrum and the words on the first two dimensions.
# Run: python -m pmivec.visualize


def main() -> None:
    """Train PMI + SVD vectors and save the spectrum and 2D word plot to save_dir."""
    ap = argparse.ArgumentParser()
    ap.add_argument("--save_dir", type=str, default="pmivec/figures")
    ap.add_argument("--file", type=str, default=None)
    ap.add_argument("--text-col", type=str, default="text")
    ap.add_argument("--id-col", type=str, default="id")
    ap.add_argument("--window", type=int, default=4)
    ap.add_argument("--dim", type=int, default=50)
    ap.add_argument("--max-labels", type=int, default=50)
    args = ap.parse_args()

    if args.file and os.path.isfile(args.file):
        docs = load_documents(args.file, text_col=args.text_col, id_col=args.id_col)
    else:
        docs = documents_from_texts(DEMO_DOCUMENTS)

    result = train(docs, window_size=args.window, dim=args.dim)
    emb = result.embeddings
    s = emb.singular_values

    os.makedirs(args.save_dir, exist_ok=True)

    # Spectrum is written even when matplotlib is missing
    with open(os.path.join(args.save_dir, "singular_values.json"), "w") as f:
        json.dump([float(x) for x in s], f, indent=0)

    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        plt.figure(figsize=(6, 4))
        kwargs = {"color": "C0"}
        if len(s) <= 20:
            kwargs["marker"] = "o"
            kwargs["markersize"] = 4
        plt.plot(range(1, len(s) + 1), s, **kwargs)
        plt.xlabel("Dimension")
        plt.ylabel("Singular value")
        plt.title("PMI matrix spectrum")
        plt.tight_layout()
        spectrum_path = os.path.join(args.save_dir, "singular_values.png")
        plt.savefig(spectrum_path, dpi=120)
        plt.close()
        print(f"Saved {spectrum_path}")
    except ImportError:
        print("matplotlib not installed; skipping spectrum plot. pip install matplotlib")
        return

    if emb.dim < 2:
        print("Fewer than 2 dimensions; skipping word plot")
        return
    coords = emb.vectors[:, :2]
    plt.figure(figsize=(8, 6))
    plt.scatter(coords[:, 0], coords[:, 1], alpha=0.7, s=20)
    for i in range(min(args.max_labels, len(emb))):
        plt.annotate(emb.id_to_word[i], (coords[i, 0], coords[i, 1]), fontsize=7, alpha=0.9)
    plt.xlabel("Dimension 1")
    plt.ylabel("Dimension 2")
    plt.title("PMI + SVD word vectors")
    plt.tight_layout()
    words_path = os.path.join(args.save_dir, "words_2d.png")
    plt.savefig(words_path, dpi=120)
    plt.close()
    print(f"Saved {words_path}")


if __name__ == "__main__":
    main()
