import re
import unicodedata

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')
_WHITESPACE = re.compile(r'\s+')


def normalize(word) -> str:
    """Normalization used for tallying only; raw words stay untouched for display."""
    s = str(word or '').strip().lower()
    s = unicodedata.normalize('NFKD', s)
    return _WHITESPACE.sub(' ', s)


def normalize_for_validation(text) -> str:
    """Lower-case, NFKD-decompose and drop combining marks (so 'Ä' compares as 'a')."""
    s = unicodedata.normalize('NFKD', str(text or '').lower())
    s = ''.join(ch for ch in s if not unicodedata.combining(ch))
    return s.strip()


def sanitize_name(name, max_length: int = 24) -> str:
    """Strip control chars, collapse whitespace, trim and clamp.

    Returns an empty string when nothing printable is left; the registry
    then falls back to a default name.
    """
    s = '' if name is None else str(name)
    s = _CONTROL_CHARS.sub('', s)
    s = _WHITESPACE.sub(' ', s).strip()
    return s[:max_length].rstrip()
