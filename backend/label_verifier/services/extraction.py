"""Field extraction from recognized label text.

Every extractor is hint-driven: it is told what the declared value is and
reports whether (and, for ABV, how) that value shows up in the text. Absence,
ambiguity and out-of-tolerance readings all come back as None; nothing here
raises for an ordinary mismatch.

Pattern lists are explicit ordered (pattern, parser) pairs, evaluated top to
bottom, so precedence can be read and tested in one place.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Pattern, Tuple
import logging

from .matching import fuzzy_match, significant_words, words_covered
from .normalization import normalize, squash

logger = logging.getLogger(__name__)


# Number not starting mid-way through another number
_NUMBER = r"(?<!\d)(\d+(?:\.\d+)?)"

ABV_TOLERANCE = Decimal("0.1")
ABV_MIN_EXCLUSIVE = Decimal("0")
ABV_MAX_INCLUSIVE = Decimal("100")


def _parse_decimal(raw: str) -> Optional[Decimal]:
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


# Order matters: first pattern is tried first
ABV_PATTERNS: List[Tuple[Pattern, Callable[[str], Optional[Decimal]]]] = [
    # "5.0%", "45 %"
    (re.compile(_NUMBER + r"\s*%"), _parse_decimal),
    # "5.0 ABV"
    (re.compile(_NUMBER + r"\s*abv", re.IGNORECASE), _parse_decimal),
    # "14 alc/vol", "14 ALC./VOL."
    (re.compile(_NUMBER + r"\s*alc\.?\s*/\s*vol", re.IGNORECASE), _parse_decimal),
    # "Alcohol by volume: 40"
    (re.compile(r"alcohol\s*by\s*volume[:\s]*(\d+(?:\.\d+)?)", re.IGNORECASE), _parse_decimal),
    # "Alc. 12.5%"
    (re.compile(r"alc\.?\s*(\d+(?:\.\d+)?)\s*%", re.IGNORECASE), _parse_decimal),
]


# Unit keywords for volume search, in priority order: (label, pattern)
# Letter-only boundaries so "12oz" and "750ml" still hit while "ml" never
# reads as "l" and "liter" never reads as "l".
VOLUME_UNITS: List[Tuple[str, Pattern]] = [
    ("FL OZ", re.compile(r"(?<![a-z])fl\.?\s*oz(?![a-z])")),
    ("OZ", re.compile(r"(?<![a-z])oz(?![a-z])")),
    ("ML", re.compile(r"(?<![a-z])ml(?![a-z])")),
    ("CL", re.compile(r"(?<![a-z])cl(?![a-z])")),
    ("LITER", re.compile(r"(?<![a-z])(?:liter|litre)s?(?![a-z])")),
    ("L", re.compile(r"(?<![a-z])l(?![a-z])")),
]

VOLUME_WINDOW = 2  # Tokens either side of the number


# Government warning phrases, first match wins.
# Mandatory US statement first, then health-warning fragments that survive
# when OCR mangles the heading, then European wording and age markers.
GOVERNMENT_WARNING_PATTERNS: List[Pattern] = [
    re.compile(p, re.IGNORECASE) for p in [
        # US government warning
        r"government\s*warning",
        r"surgeon\s*general",
        r"pregnant\s*women",
        r"driving\s*under\s*the\s*influence",
        r"health\s*risks",
        r"may\s*cause\s*birth\s*defects",
        r"impair\s*ability",
        r"operate\s*machinery",
        r"may\s*cause\s*health\s*problems",
        r"alcohol\s*abuse\s*is\s*dangerous",
        r"drink\s*responsibly",
        r"not\s*for\s*sale\s*to\s*minors",
        r"under\s*21",
        r"age\s*21",
        r"warning.*pregnan",
        r"warning.*driving",
        r"warning.*health",
        # French
        r"l'abus\s*d'alcool\s*est\s*dangereux",
        r"abus\s*dangereux",
        r"à\s*consommer\s*avec\s*modération",
        r"consommer\s*avec\s*mod[ée]ration",
        r"interdit\s*aux\s*moins\s*de\s*18\s*ans",
        r"interdit\s*aux\s*moins\s*de\s*dix-huit\s*ans",
        r"d[ée]conseill[ée]\s*aux\s*femmes\s*enceintes",
        # Other European wording
        r"excessive\s*consumption",
        r"harmful\s*to\s*health",
        r"drink\s*in\s*moderation",
        r"not\s*for\s*children",
        r"18\+",
        r"21\+",
    ]
]

# Brand OCR-tolerant window search only for brands at least this long
MIN_OCR_TOLERANT_BRAND_LENGTH = 5


@dataclass(frozen=True)
class WarningOutcome:
    """Government warning detection result."""
    found: bool
    matched_snippet: Optional[str] = None


def _abv_candidates(text: str) -> List[Tuple[Decimal, str]]:
    """All in-range ABV readings as (value, raw match), in pattern order."""
    candidates = []
    for pattern, parser in ABV_PATTERNS:
        for match in pattern.finditer(text):
            value = parser(match.group(1))
            if value is None:
                continue
            if not (ABV_MIN_EXCLUSIVE < value <= ABV_MAX_INCLUSIVE):
                logger.debug(f"ABV candidate out of range: '{match.group(0)}'")
                continue
            candidates.append((value, match.group(0)))
    return candidates


def extract_alcohol_percentage(text: str, expected: Optional[float] = None) -> Optional[float]:
    """
    Find an alcohol percentage on the label that agrees with the declared one.

    Examples:
    - ("5.0% ABV", 5.0) -> 5.0
    - ("5.1% ABV", 5.0) -> 5.1   (within ±0.1)
    - ("5.0% ABV", 5.2) -> None
    - ("5.0% ABV", None) -> None (use find_alcohol_percentages to discover)

    The tolerance absorbs misread decimals and trailing digits without hiding
    a real mismatch such as 5.0% vs 5.5%. Comparison is done in Decimal so the
    ±0.1 boundary is exact.
    """
    if expected is None or not text:
        return None

    expected_value = _parse_decimal(str(expected))
    if expected_value is None:
        return None

    for value, raw in _abv_candidates(text):
        if abs(value - expected_value) <= ABV_TOLERANCE:
            logger.debug(f"ABV matched: '{raw}' vs expected {expected}")
            return float(value)

    return None


def find_alcohol_percentages(text: str) -> List[float]:
    """
    List every plausible ABV reading in text, without an expected value.

    Used for display when no declared data is available; verification always
    goes through extract_alcohol_percentage.
    """
    if not text:
        return []
    seen = []
    for value, _ in _abv_candidates(text):
        as_float = float(value)
        if as_float not in seen:
            seen.append(as_float)
    return seen


def _leading_number(value: str) -> Optional[str]:
    match = re.search(r"\d+(?:\.\d+)?", value)
    return match.group(0) if match else None


def _token_has_number(token: str, number: str) -> bool:
    """True if number appears in token as a whole numeric run ("12oz" yes, "112" no)."""
    return re.search(r"(?<![\d.])" + re.escape(number) + r"(?!\.?\d)", token) is not None


def _find_unit(window: List[str]) -> Optional[str]:
    window_text = " ".join(window).lower()
    for label, pattern in VOLUME_UNITS:
        if pattern.search(window_text):
            return label
    return None


def extract_volume(text: str, expected_volume: Optional[str] = None) -> Optional[str]:
    """
    Check that the declared net contents appear on the label.

    1. Squashed containment ("12 FL OZ" inside "...12FL OZ...") returns
       expected_volume as given.
    2. Otherwise take the number from expected_volume and look for it in the
       raw tokens with a unit keyword within VOLUME_WINDOW tokens; OCR often
       puts "12" and "FL OZ" on separate lines. Returns "<number> <UNIT>".
    """
    if not expected_volume or not text:
        return None

    squashed_expected = squash(expected_volume)
    if not squashed_expected:
        return None
    if squashed_expected in squash(text):
        return expected_volume

    number = _leading_number(expected_volume)
    if number is None:
        return None

    tokens = text.split()
    for i, token in enumerate(tokens):
        if not _token_has_number(token, number):
            continue
        window = tokens[max(0, i - VOLUME_WINDOW): i + VOLUME_WINDOW + 1]
        unit = _find_unit(window)
        if unit:
            logger.debug(f"Volume found near token '{token}': {number} {unit}")
            return f"{number} {unit}"

    return None


def check_government_warning(text: str) -> WarningOutcome:
    """
    Detect a government health warning anywhere in the text.

    Permissive: partial phrases and foreign-language wording
    count, so false positives are possible. The result is informational.
    """
    if not text:
        return WarningOutcome(found=False)
    for pattern in GOVERNMENT_WARNING_PATTERNS:
        match = pattern.search(text)
        if match:
            return WarningOutcome(found=True, matched_snippet=match.group(0))
    return WarningOutcome(found=False)


def _contains_expected(text: str, expected: str) -> bool:
    """Normalized containment, then word-subset fallback."""
    norm_expected = normalize(expected)
    norm_text = normalize(text)
    if not norm_expected or not norm_text:
        return False
    if norm_expected in norm_text:
        return True
    return words_covered(significant_words(norm_expected), significant_words(norm_text))


def _ocr_tolerant_window_match(text: str, expected: str) -> Optional[str]:
    """
    Slide a window of len(expected words) over the text and fuzzy-match each.

    Only windows of at least MIN_OCR_TOLERANT_BRAND_LENGTH characters and
    within two characters of the expected length are compared, so a stray
    short word ("beer" vs "coors") cannot pass on character similarity.
    A real brand one glyph away ("killer" for "miller") is still accepted.
    """
    norm_expected = normalize(expected)
    if len(norm_expected) < MIN_OCR_TOLERANT_BRAND_LENGTH:
        return None
    size = len(norm_expected.split())
    words = normalize(text).split()
    for i in range(len(words) - size + 1):
        window = " ".join(words[i:i + size])
        if len(window) < MIN_OCR_TOLERANT_BRAND_LENGTH:
            continue
        if abs(len(window) - len(norm_expected)) > 2:
            continue
        if fuzzy_match(norm_expected, window):
            return window
    return None


def extract_brand_name(text: str, expected: Optional[str] = None) -> Optional[str]:
    """
    Report whether the declared brand is on the label.

    Returns expected verbatim when present, None otherwise. Never guesses a
    brand from scratch.
    """
    if not expected or not text:
        return None
    if _contains_expected(text, expected):
        return expected
    window = _ocr_tolerant_window_match(text, expected)
    if window:
        logger.info(f"Brand '{expected}' accepted via OCR-tolerant match on '{window}'")
        return expected
    return None


def extract_product_class(text: str, expected: Optional[str] = None) -> Optional[str]:
    """Report whether the declared product class is on the label (expected verbatim, or None)."""
    if not expected or not text:
        return None
    if _contains_expected(text, expected):
        return expected
    return None
