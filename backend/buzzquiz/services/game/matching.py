import re
import unicodedata

MIN_GUESS_LENGTH = 2

_NON_ALNUM = re.compile(r'[^a-z0-9 ]')


def normalize(text: str) -> str:
    """Lowercase, strip accents and punctuation, trim surrounding spaces."""
    decomposed = unicodedata.normalize('NFD', text.lower())
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub('', stripped).strip()


def is_correct_guess(guess: str, title: str) -> bool:
    """A guess matches when either normalized string contains the other.

    Guesses shorter than two normalized characters never match, otherwise
    a single letter would hit almost every title.
    """
    g = normalize(guess)
    if len(g) < MIN_GUESS_LENGTH:
        return False
    t = normalize(title or '')
    if not t:
        return False
    return g in t or t in g
