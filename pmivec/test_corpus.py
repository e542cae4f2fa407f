import numpy as np
import pandas as pd
import pytest

from pmivec.corpus_utils import (
    documents_from_texts,
    load_documents,
    token_sequences,
    tokenize_documents,
)
from pmivec.tokenization import (
    stem_tokens,
    tokenize,
    tokenize_character_shingles,
    tokenize_characters,
    tokenize_ngrams,
    tokenize_words,
)

# Tokenizer options and document loading.

TEXT = "The Error, isn't it? 42 errors."


def test_words_lowercase_and_strip_punct():
    assert tokenize_words(TEXT) == ["the", "error", "isn't", "it", "42", "errors"]
    assert tokenize_words(TEXT, lowercase=False)[0] == "The"


def test_words_keep_punct_numeric_and_stopwords():
    assert tokenize_words(TEXT, strip_punct=False) == [
        "the", "error", ",", "isn't", "it", "?", "42", "errors", ".",
    ]
    assert tokenize_words(TEXT, strip_numeric=True, stopwords={"the", "it"}) == [
        "error",
        "isn't",
        "errors",
    ]


def test_stopwords_match_regardless_of_case():
    assert tokenize_words("The Error", lowercase=False, stopwords={"the"}) == ["Error"]
    assert tokenize_words("the error", stopwords={"THE"}) == ["error"]


def test_non_string_text_gives_no_tokens():
    assert tokenize_words(None) == []
    assert tokenize_words(float("nan")) == []
    assert tokenize_characters(None) == []


def test_ngrams_orders_and_delimiter():
    text = "the quick brown fox"
    assert tokenize_ngrams(text, n=2) == ["the quick", "quick brown", "brown fox"]
    both = tokenize_ngrams(text, n=2, n_min=1, ngram_delim="_")
    assert both[:4] == ["the", "quick", "brown", "fox"]
    assert both[4:] == ["the_quick", "quick_brown", "brown_fox"]
    assert tokenize_ngrams(text, n=2, stopwords={"the"}) == ["quick brown", "brown fox"]
    assert tokenize_ngrams("one two", n=3) == []
    with pytest.raises(ValueError):
        tokenize_ngrams(text, n=2, n_min=3)


def test_characters_and_shingles():
    assert tokenize_characters("Ab c!") == ["a", "b", "c"]
    assert tokenize_characters("Ab c!", strip_non_alphanum=False) == ["a", "b", "c", "!"]
    assert tokenize_character_shingles("ab cd", n=3) == ["abc", "bcd"]
    assert tokenize_character_shingles("abc", n=2, n_min=1) == ["a", "b", "c", "ab", "bc"]


def test_tokenize_dispatch():
    assert tokenize("a b", unit="words") == ["a", "b"]
    assert tokenize("a b c", unit="ngrams", n=2) == ["a b", "b c"]
    with pytest.raises(ValueError):
        tokenize("a b", unit="sentences")


def test_stemming():
    assert stem_tokens(["complaints", "running"]) == ["complaint", "run"]


def test_load_documents_from_gzip(tmp_path):
    path = tmp_path / "complaints.csv.gz"
    pd.DataFrame(
        {
            "complaint_id": [101, 102, 103],
            "product": ["card", "loan", "card"],
            "narrative": ["I was charged twice", None, "The bank made an error"],
        }
    ).to_csv(path, index=False)
    docs = load_documents(str(path), text_col="narrative", id_col="complaint_id")
    assert list(docs.columns) == ["id", "text"]
    assert docs["id"].tolist() == ["101", "103"]
    assert docs["text"].iloc[1] == "The bank made an error"


def test_load_documents_missing_column(tmp_path):
    path = tmp_path / "docs.tsv"
    pd.DataFrame({"id": [1], "body": ["x"]}).to_csv(path, sep="\t", index=False)
    assert load_documents(str(path), text_col="body", sep="\t")["text"].tolist() == ["x"]
    with pytest.raises(ValueError):
        load_documents(str(path), text_col="text", sep="\t")


def test_documents_need_unique_ids():
    with pytest.raises(ValueError):
        documents_from_texts(["a", "b"], ids=[1, 1])
    with pytest.raises(ValueError):
        documents_from_texts(["a", "b"], ids=[1])


def test_tokenize_documents_min_count_renumbers_positions():
    docs = documents_from_texts(["a b a c", "b d"], ids=["x", "y"])
    tidy = tokenize_documents(docs, min_count=2)
    assert tidy["token"].tolist() == ["a", "b", "a", "b"]
    assert tidy["position"].tolist() == [0, 1, 2, 0]
    assert token_sequences(tidy) == {"x": ["a", "b", "a"], "y": ["b"]}


def test_tokenize_documents_with_stemming_and_ngrams():
    docs = documents_from_texts(["errors and errors"])
    assert tokenize_documents(docs, stem=True)["token"].tolist() == [
        "error", "and", "error",
    ]
    bigrams = tokenize_documents(docs, unit="ngrams", n=2)
    assert bigrams["token"].tolist() == ["errors and", "and errors"]
    assert np.array_equal(bigrams["position"].to_numpy(), np.arange(2))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
