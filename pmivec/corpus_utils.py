import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from pmivec.tokenization import stem_tokens, tokenize

# Document input: one row per document (id, text), read from a (compressed) delimited file
# or built in memory, then turned into a tidy (id, position, token) table.

logger = logging.getLogger(__name__)

DEMO_DOCUMENTS = [
    "I found an error on my credit report and the bureau has not fixed the error",
    "There is a mistake on my credit report that the bureau refuses to fix",
    "The bank made a mistake with my payment and charged a late fee",
    "My payment was applied late because of a bank problem with the account",
    "The credit card company reported a problem with my account to the bureau",
    "I disputed the error with the credit bureau but the issue is still on my report",
    "The issue with my loan payment was never resolved by the bank",
    "The mortgage company charged a fee because of their own mistake",
    "A problem with the loan account caused a late payment on my credit report",
    "The debt collector keeps calling about a debt that is not mine",
    "The collector reported the debt to the credit bureau without notice",
    "I asked the bank to fix the issue and remove the fee from my account",
]


def documents_from_texts(texts: Iterable[str], ids: Optional[Iterable] = None) -> pd.DataFrame:
    """Build a document table from in-memory texts.

    Args:
        texts: Document texts.
        ids: Document identifiers; defaults to "1", "2", ... in order.

    Returns:
        DataFrame with columns "id" (str) and "text".
    """
    texts = list(texts)
    if ids is None:
        ids = [str(i + 1) for i in range(len(texts))]
    else:
        ids = [str(i) for i in ids]
    if len(ids) != len(texts):
        raise ValueError(f"Got {len(ids)} ids for {len(texts)} texts")
    return _validate(pd.DataFrame({"id": ids, "text": texts}))


def load_documents(
    path: str,
    text_col: str = "text",
    id_col: str = "id",
    sep: str = ",",
    compression: str = "infer",
    **read_kwargs,
) -> pd.DataFrame:
    """Read documents from a delimited file; gzip/bz2/zip/xz are decompressed by pandas.

    Args:
        path: Path to the file (e.g. complaints.csv.gz).
        text_col: Column holding the document text. Defaults to "text".
        id_col: Column holding the document identifier. Defaults to "id".
        sep: Field delimiter. Defaults to ",".
        compression: Passed to pandas.read_csv. Defaults to "infer" (from the extension).
        **read_kwargs: Extra pandas.read_csv arguments.

    Returns:
        DataFrame with columns "id" (str) and "text"; rows without text are dropped.

    Raises:
        ValueError: If a column is missing or ids are not unique.
    """
    df = pd.read_csv(path, sep=sep, compression=compression, **read_kwargs)
    missing = [c for c in (id_col, text_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Column(s) {missing} not in {path}; found {list(df.columns)}")
    df = df[[id_col, text_col]].rename(columns={id_col: "id", text_col: "text"})
    n_before = len(df)
    df = df.dropna(subset=["text"])
    if len(df) < n_before:
        logger.info("Dropped %d documents with no text", n_before - len(df))
    df = df.assign(id=df["id"].astype(str)).reset_index(drop=True)
    logger.info("Loaded %d documents from %s", len(df), path)
    return _validate(df)


def _validate(df: pd.DataFrame) -> pd.DataFrame:
    dupes = df["id"][df["id"].duplicated()]
    if len(dupes):
        raise ValueError(f"Document ids must be unique; repeated: {sorted(set(dupes))[:5]}")
    return df


def tokenize_documents(
    docs: pd.DataFrame,
    unit: str = "words",
    min_count: int = 1,
    stem: bool = False,
    **tokenizer_options,
) -> pd.DataFrame:
    """Tokenize every document into a tidy table, one row per token.

    Tokens occurring fewer than min_count times across the collection are removed and
    positions renumbered, so windows later slide over the remaining sequence.

    Args:
        docs: Document table with "id" and "text".
        unit: Token unit (see tokenization.tokenize). Defaults to "words".
        min_count: Minimum collection frequency to keep a token. Defaults to 1.
        stem: Apply Snowball stemming to the tokens. Defaults to False.
        **tokenizer_options: Passed to the tokenizer.

    Returns:
        DataFrame with columns "id", "position" (0-based within document), "token".
    """
    ids: List[str] = []
    positions: List[int] = []
    tokens: List[str] = []
    for doc_id, text in zip(docs["id"], docs["text"]):
        toks = tokenize(text, unit=unit, **tokenizer_options)
        if stem:
            toks = stem_tokens(toks)
        ids.extend([doc_id] * len(toks))
        positions.extend(range(len(toks)))
        tokens.extend(toks)
    tidy = pd.DataFrame({"id": ids, "position": positions, "token": tokens})
    if min_count > 1 and len(tidy):
        counts = tidy["token"].map(tidy["token"].value_counts())
        tidy = tidy[counts >= min_count].reset_index(drop=True)
        tidy["position"] = tidy.groupby("id", sort=False).cumcount()
    logger.info(
        "Tokenized %d documents into %d tokens (%d types)",
        len(docs),
        len(tidy),
        tidy["token"].nunique(),
    )
    return tidy


def token_sequences(tidy: pd.DataFrame) -> Dict[str, List[str]]:
    """Ordered mapping document id -> token list, in document order."""
    return {
        doc_id: group.sort_values("position", kind="stable")["token"].tolist()
        for doc_id, group in tidy.groupby("id", sort=False)
    }
