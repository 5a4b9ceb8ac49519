from typing import FrozenSet, Final, List, Sequence, Set
from core.tokenizer import normalize

NGRAM_SIZE: Final[int] = 3
OVERLAP_WEIGHT: Final[float] = 0.4
NGRAM_WEIGHT: Final[float] = 0.6
# An n-gram score above this is a near-verbatim phrase match and wins outright.
NGRAM_DECISIVE: Final[float] = 0.5
MIN_COMMON_TOKENS: Final[int] = 3


def _overlap(a: Set, b: Set) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / min(len(a), len(b))


def word_ngrams(tokens: Sequence[str], n: int = NGRAM_SIZE) -> FrozenSet[str]:
    return frozenset(" ".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1))


def overlap_score(text1: str, text2: str) -> float:
    """Overlap coefficient of the two normalized token sets."""
    return _overlap(set(normalize(text1)), set(normalize(text2)))


def _ngram_from_tokens(t1: List[str], t2: List[str], n: int) -> float:
    if len(t1) < n or len(t2) < n:
        return _overlap(set(t1), set(t2))
    return _overlap(word_ngrams(t1, n), word_ngrams(t2, n))


def ngram_score(text1: str, text2: str, n: int = NGRAM_SIZE) -> float:
    """
    Shared word n-grams over the smaller n-gram set.
    Falls back to the overlap coefficient when either side has fewer than n tokens.
    """
    return _ngram_from_tokens(normalize(text1), normalize(text2), n)


def similarity(text1: str, text2: str) -> float:
    """Blend of token overlap and 3-gram overlap, in [0, 1]."""
    t1, t2 = normalize(text1), normalize(text2)
    if not t1 or not t2:
        return 0.0
    ngram = _ngram_from_tokens(t1, t2, NGRAM_SIZE)
    if ngram > NGRAM_DECISIVE:
        return ngram
    overlap = _overlap(set(t1), set(t2))
    return OVERLAP_WEIGHT * overlap + NGRAM_WEIGHT * ngram


def shared_token_count(chunk: str, snippet: str) -> int:
    """Chunk tokens that also occur in the snippet; repeated chunk tokens count each time."""
    vocab = set(normalize(snippet))
    return sum(1 for t in normalize(chunk) if t in vocab)


def is_substantial(chunk: str, snippet: str) -> bool:
    """True when the chunk shares enough meaningful vocabulary with the snippet to count as evidence."""
    return shared_token_count(chunk, snippet) >= MIN_COMMON_TOKENS
