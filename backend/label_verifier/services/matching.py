"""Fuzzy matching tuned for optical-recognition noise.

The matcher is a cascade, cheapest check first:

1. Normalized equality
2. Normalized containment (either direction)
3. Word subset: every expected word appears inside some extracted word
   ("Bourbon Whiskey" vs "Kentucky Straight Bourbon Whiskey")
4. Reverse word subset with equal word counts
5. Character similarity for near-equal lengths, counting known OCR glyph
   confusions as matches ("budwe1ser" vs "budweiser")

Long descriptive phrases are handled by 2-4, short proper nouns with misread
glyphs by 5. Step 5 never runs when lengths differ by more than
MAX_LENGTH_DIFFERENCE.
"""

from typing import List
import logging

from rapidfuzz import fuzz

from .normalization import normalize

logger = logging.getLogger(__name__)


# Glyphs that OCR engines commonly read as one another
OCR_CONFUSIONS = {
    "c": {"e", "o", "g"},
    "e": {"c", "o"},
    "o": {"c", "e", "0"},
    "0": {"o"},
    "i": {"l", "1"},
    "l": {"i", "1"},
    "1": {"i", "l"},
    "u": {"n", "v"},
    "n": {"u", "v"},
    "v": {"u", "n"},
    "q": {"g", "o"},
    "g": {"q", "o", "c"},
    "t": {"f", "l"},
    "f": {"t", "l"},
    "s": {"5"},
    "5": {"s"},
    "b": {"8"},
    "8": {"b"},
}

MIN_WORD_LENGTH = 3  # Words of 1-2 chars carry no signal ("fl", "oz", "of")
MAX_LENGTH_DIFFERENCE = 2
CHARACTER_MATCH_RATIO = 0.7


def significant_words(normalized: str) -> List[str]:
    """Split normalized text into words of at least MIN_WORD_LENGTH chars."""
    return [w for w in normalized.split() if len(w) >= MIN_WORD_LENGTH]


def words_covered(needles: List[str], haystack: List[str]) -> bool:
    """True if every needle word is a substring of some haystack word."""
    if not needles:
        return False
    return all(any(n in h for h in haystack) for n in needles)


def chars_equivalent(a: str, b: str) -> bool:
    """Equal characters, or characters related by the OCR confusion table."""
    return a == b or b in OCR_CONFUSIONS.get(a, ())


def character_similarity(expected: str, extracted: str) -> float:
    """
    Position-by-position agreement over the shorter of two normalized strings.

    Returns 0.0 when the lengths differ by more than MAX_LENGTH_DIFFERENCE.
    """
    if abs(len(expected) - len(extracted)) > MAX_LENGTH_DIFFERENCE:
        return 0.0
    min_length = min(len(expected), len(extracted))
    if min_length == 0:
        return 0.0
    matches = sum(
        1 for i in range(min_length)
        if chars_equivalent(expected[i], extracted[i])
    )
    return matches / min_length


def fuzzy_match(expected: str, extracted: str) -> bool:
    """
    Tolerant comparison of an expected value against extracted text.

    Not commutative: word-subset checks look for the *expected* words inside
    the extracted ones, so swapping arguments can change the answer when the
    inputs differ in length.
    """
    norm_expected = normalize(expected)
    norm_extracted = normalize(extracted)

    if norm_expected == norm_extracted:
        return True

    if not norm_expected or not norm_extracted:
        return False

    if norm_expected in norm_extracted or norm_extracted in norm_expected:
        return True

    expected_words = significant_words(norm_expected)
    extracted_words = significant_words(norm_extracted)

    if words_covered(expected_words, extracted_words):
        return True

    if (len(expected_words) == len(extracted_words)
            and words_covered(extracted_words, expected_words)):
        return True

    score = character_similarity(norm_expected, norm_extracted)
    if score >= CHARACTER_MATCH_RATIO:
        logger.debug(f"OCR-tolerant match: '{norm_extracted}' ~ '{norm_expected}' ({score:.0%})")
        return True

    return False


def similarity_score(expected: str, text: str) -> float:
    """
    Best partial similarity (0-1) between an expected value and any span of text.

    Informational only; match decisions come from fuzzy_match and the extractors.
    """
    norm_expected = normalize(expected)
    norm_text = normalize(text)
    if not norm_expected or not norm_text:
        return 0.0
    return fuzz.partial_ratio(norm_expected, norm_text) / 100.0
