"""Text normalization shared by the extractors and the fuzzy matcher."""

import re

_LINE_BREAKS = re.compile(r"[\r\n\v\f\x85\u2028\u2029]+")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize(text: str) -> str:
    """
    Canonicalize recognized text for comparison.

    Lowercases, turns line breaks into spaces, drops every character outside
    the word/space class and trims the ends. Runs of inner spaces are kept.

    Casing uses plain ``str.lower()`` on code points, so no locale rules apply
    (e.g. Turkish dotted/dotless i is not special-cased).

    Examples:
    - "GOVERNMENT WARNING:" -> "government warning"
    - "Old Tom\\nDistillery" -> "old tom distillery"
    """
    if not text:
        return ""
    text = text.lower()
    text = _LINE_BREAKS.sub(" ", text)
    text = _NON_WORD.sub("", text)
    return text.strip()


def squash(text: str) -> str:
    """Lowercase and remove spaces, line breaks and periods ("12 FL. OZ" -> "12floz")."""
    if not text:
        return ""
    return re.sub(r"[\s.]+", "", text).lower()
