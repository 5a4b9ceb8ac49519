import re

_CITATION_RE = re.compile(r"\[\w+\]")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_SPACES_RE = re.compile(r"\s+")


def strip_citations(text: str) -> str:
    """Remove bracketed footnote markers such as [12] or [citation]."""
    return _CITATION_RE.sub("", text)


def clean_query(text: str, max_chars: int = 150) -> str:
    """
    - Trim `text` to `max_chars` characters.
    - Drop citation markers, turn punctuation into spaces, collapse whitespace.
    """
    q = strip_citations(text[:max_chars])
    q = _NON_WORD_RE.sub(" ", q)
    return _SPACES_RE.sub(" ", q).strip()


def percent(part: float, whole: float) -> int:
    """Half-up integer percentage; 0 when `whole` is 0."""
    if not whole:
        return 0
    return round_half_up(100 * part / whole)


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores round .5 upwards.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
