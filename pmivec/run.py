import argparse
import logging

from pmivec.corpus_utils import DEMO_DOCUMENTS, documents_from_texts, load_documents
from pmivec.eval import print_nearest, top_words_per_dimension
from pmivec.tokenization import UNITS, english_stop_words
from pmivec.train import train

# Entry point: PMI + SVD word vectors for the demo documents or a delimited file.
# Usage: python -m pmivec.run [--file complaints.csv.gz --text-col ... --id-col ...]


def main():
    """Train on demo documents or a file; print nearest neighbours and top dimension words."""
    ap = argparse.ArgumentParser()
    ap.add_argument("--file", type=str, default=None, help="Delimited file, may be compressed")
    ap.add_argument("--text-col", type=str, default="text")
    ap.add_argument("--id-col", type=str, default="id")
    ap.add_argument("--sep", type=str, default=",")
    ap.add_argument("--window", type=int, default=4)
    ap.add_argument("--dim", type=int, default=100)
    ap.add_argument("--min-count", type=int, default=1)
    ap.add_argument("--unit", type=str, default="words", choices=UNITS)
    ap.add_argument("--ngram", type=int, default=None, help="n for ngram/shingle units")
    ap.add_argument("--stop-words", action="store_true", help="Remove NLTK English stop words")
    ap.add_argument("--stem", action="store_true", help="Snowball-stem tokens")
    ap.add_argument("--jobs", type=int, default=1, help="Worker processes for windowing")
    ap.add_argument("--positive", action="store_true", help="Positive PMI only")
    ap.add_argument("--weight", action="store_true", help="Scale vectors by singular values")
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--query", nargs="*", default=None, help="Words to find neighbours for")
    ap.add_argument("-k", type=int, default=5, help="Neighbours per query word")
    ap.add_argument("--output", type=str, default=None, help="Write (item1, dimension, value) CSV")
    ap.add_argument("--log-level", type=str, default="INFO")
    args = ap.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.file:
        docs = load_documents(args.file, text_col=args.text_col, id_col=args.id_col, sep=args.sep)
    else:
        docs = documents_from_texts(DEMO_DOCUMENTS)

    tokenizer_options = {}
    if args.ngram is not None:
        if args.unit not in ("ngrams", "character_shingles"):
            ap.error("--ngram needs --unit ngrams or character_shingles")
        tokenizer_options["n"] = args.ngram
    if args.stop_words:
        if args.unit not in ("words", "ngrams"):
            ap.error("--stop-words needs --unit words or ngrams")
        tokenizer_options["stopwords"] = english_stop_words()

    result = train(
        docs,
        unit=args.unit,
        window_size=args.window,
        dim=args.dim,
        min_count=args.min_count,
        stem=args.stem,
        n_jobs=args.jobs,
        positive=args.positive,
        weight_singular_values=args.weight,
        seed=args.seed,
        **tokenizer_options,
    )
    emb = result.embeddings
    print(f"Documents {len(docs)}, windows {result.windows['window_id'].nunique()}")
    print(f"Vocab size {len(emb)}, scored pairs {len(result.pmi)}, dimensions {emb.dim}")

    print("Nearest neighbours (inner product):")
    print_nearest(emb, args.query, k=args.k)

    print("Top words in the first 3 dimensions:")
    top = top_words_per_dimension(emb, dimensions=range(1, min(3, emb.dim) + 1), n=args.k)
    for dim, group in top.groupby("dimension"):
        words = ", ".join(f"{w}({v:+.3f})" for w, v in zip(group["item1"], group["value"]))
        print(f"  {dim}: {words}")

    if args.output:
        emb.to_frame().to_csv(args.output, index=False)
        print(f"Wrote {len(emb) * emb.dim} rows to {args.output}")


if __name__ == "__main__":
    main()
