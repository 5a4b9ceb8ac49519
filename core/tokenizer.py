import re
from typing import Final, FrozenSet, Iterable, List
from util.functions import strip_citations

MIN_TOKEN_LENGTH: Final[int] = 3

# Common English function words; they carry no evidence of copying.
STOP_WORDS: Final[FrozenSet[str]] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "must", "shall", "can", "need", "it", "its",
        "this", "that", "these", "those", "am", "also", "so", "than", "too",
        "very", "just", "about", "into", "through", "during", "before", "after",
        "above", "below", "between", "under", "again", "further", "then", "once",
        "here", "there", "when", "where", "why", "how", "all", "each", "few",
        "more", "most", "other", "some", "such", "no", "nor", "not", "only",
        "own", "same", "both", "because", "until", "while", "which", "who",
        "whom", "what", "if", "we", "they", "you", "he", "she", "i", "me",
        "my", "your", "his", "her", "our", "their", "any", "up", "out",
        "them", "him", "us", "being", "having", "off", "over", "yet",
    }
)

_NON_WORD_RE = re.compile(r"[^\w\s]")


def normalize(text: str) -> List[str]:
    """
    Lowercase, drop citation markers and punctuation, split on whitespace,
    keep tokens longer than two characters that are not stop-words.
    """
    if not text:
        return []
    cleaned = _NON_WORD_RE.sub("", strip_citations(text.lower()))
    return [
        t
        for t in cleaned.split()
        if len(t) >= MIN_TOKEN_LENGTH and t not in STOP_WORDS
    ]


def normalize_to_string(tokens: Iterable[str]) -> str:
    return " ".join(tokens)
