import re
from typing import NamedTuple, Optional

from .text import normalize_for_validation

DEFAULT_AFFIX_MIN_LENGTH = 4

_TOKEN_SEPARATORS = re.compile(r'[\s\-_]+')


class Rejection(NamedTuple):
    code: str
    reason: str


EMPTY = Rejection('empty', 'Bitte gib ein Wort ein.')
EXACT_MATCH = Rejection('exact_match', 'Das ist genau das Prompt-Wort.')
PROMPT_TOKEN = Rejection('prompt_token', 'Wähle nicht einfach einen Teil des Prompts.')
AFFIX = Rejection('affix', 'Zu nah am Prompt (Vorsilbe/Nachsilbe).')
NOT_COLLECTING = Rejection('not_collecting', 'Gerade läuft keine Runde.')


def validate_association(prompt_raw, candidate_raw,
                         affix_min_length: int = DEFAULT_AFFIX_MIN_LENGTH) -> Optional[Rejection]:
    """Check whether a candidate word is too close to the prompt.

    Returns None when the word is allowed, otherwise the Rejection for the
    first rule that matched:

    1. empty candidate
    2. candidate equals the prompt
    3. multi-token prompt (split on whitespace, '-' and '_'): candidate equals
       one of the tokens; anything else is allowed
    4. single-token prompt: candidate of at least ``affix_min_length`` chars
       that the prompt starts or ends with (prompt "Dachziegel" blocks
       "Dach" and "Ziegel", but not "Ziege")
    """
    prompt = normalize_for_validation(prompt_raw)
    candidate = normalize_for_validation(candidate_raw)

    if not candidate:
        return EMPTY
    if candidate == prompt:
        return EXACT_MATCH

    tokens = [t for t in _TOKEN_SEPARATORS.split(prompt) if t]
    if len(tokens) > 1:
        if candidate in tokens:
            return PROMPT_TOKEN
        return None

    if len(candidate) >= affix_min_length:
        if prompt.startswith(candidate) or prompt.endswith(candidate):
            return AFFIX
    return None
