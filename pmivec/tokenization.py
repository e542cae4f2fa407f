from typing import Collection, List, Optional, Set

import nltk
from nltk.stem.snowball import SnowballStemmer
from nltk.tokenize import RegexpTokenizer
from nltk.util import ngrams

# Tokenizer invocation: words, word n-grams, characters and character shingles via NLTK.
# Stop words are removed before n-grams are formed; non-string input (missing text) yields [].

_WORDS = RegexpTokenizer(r"\w+(?:['’]\w+)*")
_WORDS_AND_PUNCT = RegexpTokenizer(r"\w+(?:['’]\w+)*|[^\w\s]")

UNITS = ("words", "ngrams", "characters", "character_shingles")


def tokenize_words(
    text: str,
    lowercase: bool = True,
    strip_punct: bool = True,
    strip_numeric: bool = False,
    stopwords: Optional[Collection[str]] = None,
) -> List[str]:
    """Split text into word tokens.

    Args:
        text: Raw input string.
        lowercase: Case-fold before splitting. Defaults to True.
        strip_punct: Drop punctuation; if False, each punctuation mark is its own token.
            Defaults to True.
        strip_numeric: Drop tokens made only of digits. Defaults to False.
        stopwords: Tokens to remove; matching ignores case. Defaults to None.

    Returns:
        List of token strings in text order.
    """
    if not isinstance(text, str):
        return []
    if lowercase:
        text = text.lower()
    tokenizer = _WORDS if strip_punct else _WORDS_AND_PUNCT
    tokens = tokenizer.tokenize(text)
    if strip_numeric:
        tokens = [t for t in tokens if not t.isdigit()]
    if stopwords:
        stop = {s.lower() for s in stopwords}
        tokens = [t for t in tokens if t.lower() not in stop]
    return tokens


def _check_orders(n: int, n_min: Optional[int]) -> int:
    if n_min is None:
        n_min = n
    if n < 1 or n_min < 1 or n_min > n:
        raise ValueError(f"Need 1 <= n_min <= n, got n_min={n_min}, n={n}")
    return n_min


def tokenize_ngrams(
    text: str,
    n: int = 3,
    n_min: Optional[int] = None,
    ngram_delim: str = " ",
    lowercase: bool = True,
    stopwords: Optional[Collection[str]] = None,
) -> List[str]:
    """Word n-grams of every order from n_min to n, joined by ngram_delim.

    Output is grouped by order (all n_min-grams first), each group in text order.

    Raises:
        ValueError: If the orders are not 1 <= n_min <= n.
    """
    n_min = _check_orders(n, n_min)
    words = tokenize_words(text, lowercase=lowercase, stopwords=stopwords)
    out = []
    for order in range(n_min, n + 1):
        out.extend(ngram_delim.join(g) for g in ngrams(words, order))
    return out


def tokenize_characters(
    text: str,
    lowercase: bool = True,
    strip_non_alphanum: bool = True,
) -> List[str]:
    """Single-character tokens; whitespace is always dropped."""
    if not isinstance(text, str):
        return []
    if lowercase:
        text = text.lower()
    if strip_non_alphanum:
        return [c for c in text if c.isalnum()]
    return [c for c in text if not c.isspace()]


def tokenize_character_shingles(
    text: str,
    n: int = 3,
    n_min: Optional[int] = None,
    lowercase: bool = True,
    strip_non_alphanum: bool = True,
) -> List[str]:
    """Character n-grams (shingles) of orders n_min..n over the character stream."""
    n_min = _check_orders(n, n_min)
    chars = tokenize_characters(text, lowercase=lowercase, strip_non_alphanum=strip_non_alphanum)
    out = []
    for order in range(n_min, n + 1):
        out.extend("".join(g) for g in ngrams(chars, order))
    return out


def tokenize(text: str, unit: str = "words", **options) -> List[str]:
    """Dispatch to the tokenizer for the given unit.

    Args:
        text: Raw input string.
        unit: One of "words", "ngrams", "characters", "character_shingles". Defaults to "words".
        **options: Keyword arguments for the selected tokenizer.

    Returns:
        List of token strings.

    Raises:
        ValueError: If unit is unknown.
    """
    if unit == "words":
        return tokenize_words(text, **options)
    if unit == "ngrams":
        return tokenize_ngrams(text, **options)
    if unit == "characters":
        return tokenize_characters(text, **options)
    if unit == "character_shingles":
        return tokenize_character_shingles(text, **options)
    raise ValueError(f"Unknown token unit {unit!r}; expected one of {', '.join(UNITS)}")


def stem_tokens(tokens: List[str], language: str = "english") -> List[str]:
    """Reduce tokens to Snowball stems (e.g. "complaints" -> "complaint")."""
    stemmer = SnowballStemmer(language)
    return [stemmer.stem(t) for t in tokens]


def english_stop_words() -> Set[str]:
    """NLTK's English stop-word list; downloads the corpus on first use."""
    from nltk.corpus import stopwords

    try:
        return set(stopwords.words("english"))
    except LookupError:
        nltk.download("stopwords", quiet=True)
        return set(stopwords.words("english"))
