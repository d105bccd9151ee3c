"""Tests for text normalization and field extraction."""

import pytest
from label_verifier.services.normalization import normalize, squash
from label_verifier.services.extraction import (
    extract_alcohol_percentage,
    find_alcohol_percentages,
    extract_volume,
    check_government_warning,
    extract_brand_name,
    extract_product_class,
    ABV_PATTERNS,
)


class TestNormalize:
    """Test text normalization."""

    def test_case_insensitive(self):
        """Test upper and lower case normalize the same."""
        assert normalize("HELLO") == normalize("hello") == "hello"

    def test_strips_punctuation(self):
        """Test punctuation is removed."""
        assert normalize("Hello, World! How are you?") == "hello world how are you"

    def test_trims_whitespace(self):
        """Test surrounding whitespace is removed."""
        assert normalize("  HELLO WORLD  ") == "hello world"

    def test_line_breaks_become_spaces(self):
        """Test multi-line OCR output joins into one line."""
        assert normalize("Old Tom\nDistillery") == "old tom distillery"
        assert normalize("Old Tom\r\nDistillery") == "old tom distillery"

    @pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x0b", "\x0c", "\x85"])
    def test_unicode_line_separators(self, separator):
        """Test every line separator joins lines with a space."""
        assert normalize(f"Old Tom{separator}Distillery") == "old tom distillery"

    def test_preserves_inner_spaces(self):
        """Test runs of spaces between words are kept."""
        assert normalize("Hello   World") == "hello   world"

    def test_empty(self):
        """Test empty input."""
        assert normalize("") == ""
        assert normalize("\n\n") == ""

    @pytest.mark.parametrize("text", [
        "GOVERNMENT WARNING: (1) According to the Surgeon General",
        "  ! leading punctuation",
        "Budweiser\n5.0% ABV\n12 FL. OZ.",
        "L'abus d'alcool est dangereux",
        "",
    ])
    def test_idempotent(self, text):
        """Test normalizing twice changes nothing."""
        once = normalize(text)
        assert normalize(once) == once

    def test_squash(self):
        """Test squash drops spaces, line breaks and periods."""
        assert squash("12 FL. OZ.") == "12floz"
        assert squash("750\nmL") == "750ml"


class TestAlcoholPercentage:
    """Test ABV extraction against a declared value."""

    def test_exact_match(self):
        """Test declared ABV found on label."""
        assert extract_alcohol_percentage("5.0% ABV", 5.0) == 5.0

    def test_outside_tolerance(self):
        """Test readings more than 0.1 off are rejected."""
        assert extract_alcohol_percentage("5.0% ABV", 5.2) is None
        assert extract_alcohol_percentage("5.11% ABV", 5.0) is None

    def test_tolerance_boundary_inclusive(self):
        """Test a difference of exactly 0.1 still matches."""
        assert extract_alcohol_percentage("5.1% ABV", 5.0) == 5.1
        assert extract_alcohol_percentage("4.9% ABV", 5.0) == 4.9

    def test_returns_label_value_not_expected(self):
        """Test the value read from the label is returned."""
        assert extract_alcohol_percentage("12.5% ABV", 12.4) == 12.5

    def test_no_expected_value(self):
        """Test no declared value means no result."""
        assert extract_alcohol_percentage("12.5% ABV") is None

    def test_true_mismatch_not_masked(self):
        """Test 5.0 vs 5.5 is a mismatch."""
        assert extract_alcohol_percentage("5.5% ABV", 5.0) is None

    def test_out_of_range_rejected(self):
        """Test readings outside (0, 100] are ignored."""
        assert extract_alcohol_percentage("150% ABV", 50.0) is None
        assert extract_alcohol_percentage("0% ABV", 0.0) is None

    def test_number_not_split(self):
        """Test a reading is never taken from the middle of a longer number."""
        assert extract_alcohol_percentage("15% ABV", 5.0) is None
        assert find_alcohol_percentages("12.5% ABV") == [12.5]

    def test_number_glued_to_period(self):
        """Test OCR output with the space after a period dropped."""
        assert extract_alcohol_percentage("ALC/VOL.4.5%", 4.5) == 4.5
        assert extract_alcohol_percentage("ABV.5.0%", 5.0) == 5.0

    def test_abv_without_percent(self):
        """Test 'N ABV' format."""
        assert extract_alcohol_percentage("Lager 4.2 ABV", 4.2) == 4.2

    def test_alc_vol_format(self):
        """Test 'N alc/vol' format."""
        assert extract_alcohol_percentage("14 alc/vol", 14.0) == 14.0
        assert extract_alcohol_percentage("40 ALC./VOL.", 40.0) == 40.0

    def test_alcohol_by_volume_prefix(self):
        """Test 'Alcohol by volume: N' format."""
        assert extract_alcohol_percentage("Alcohol by volume: 40", 40.0) == 40.0

    def test_alc_prefix(self):
        """Test 'Alc. N%' format."""
        assert extract_alcohol_percentage("Alc. 8.5%", 8.5) == 8.5

    def test_scans_all_candidates(self):
        """Test a later reading can satisfy the declared value."""
        text = "Brewed with 2% rye malt\nCoors 5.0 ABV"
        assert extract_alcohol_percentage(text, 5.0) == 5.0

    def test_empty_text(self):
        """Test empty text."""
        assert extract_alcohol_percentage("", 5.0) is None

    def test_patterns_are_ordered_pairs(self):
        """Test pattern table shape (pattern, parser)."""
        assert len(ABV_PATTERNS) == 5
        for pattern, parser in ABV_PATTERNS:
            assert callable(parser)
            assert pattern.groups == 1


class TestFindAlcoholPercentages:
    """Test ABV discovery without a declared value."""

    def test_lists_valid_candidates(self):
        """Test valid readings in pattern order, out-of-range skipped."""
        assert find_alcohol_percentages("12% then 150% then 7 ABV") == [12.0, 7.0]

    def test_deduplicates(self):
        """Test repeated readings appear once."""
        assert find_alcohol_percentages("5.0% ABV ... 5.0 ABV") == [5.0]

    def test_no_match(self):
        """Test text with no ABV."""
        assert find_alcohol_percentages("Kentucky Straight Bourbon") == []
        assert find_alcohol_percentages("") == []


class TestVolume:
    """Test net contents extraction against a declared value."""

    def test_exact_volume(self):
        """Test declared volume echoed when present."""
        assert extract_volume("12 FL OZ beer", "12 FL OZ") == "12 FL OZ"

    def test_formatting_differences(self):
        """Test spacing, periods and case are ignored."""
        assert extract_volume("12 floz beer", "12 FL OZ") == "12 FL OZ"
        assert extract_volume("NET CONTENTS 12 FL. OZ.", "12 fl oz") == "12 fl oz"
        assert extract_volume("750 ml wine bottle", "750 ML") == "750 ML"
        assert extract_volume("1 liter bottle", "1 LITER") == "1 LITER"

    def test_number_and_unit_on_separate_lines(self):
        """Test number found with a unit a few tokens away."""
        assert extract_volume("Cabernet 750\nWINE ML", "750 mL") == "750 ML"

    def test_unit_synthesized_from_label(self):
        """Test the unit reported is the one on the label."""
        assert extract_volume("Budweiser 12 OZ", "12 FL OZ") == "12 OZ"
        assert extract_volume("Lager 12oz can", "12 FL OZ") == "12 OZ"

    def test_no_volume(self):
        """Test text without the declared volume."""
        assert extract_volume("no volume here", "12 FL OZ") is None
        assert extract_volume("Coors Light 4.5% ABV 16 FL OZ", "12 FL OZ") is None

    def test_number_not_matched_inside_other_number(self):
        """Test '1' does not match inside '16' or '1.5'."""
        assert extract_volume("16 OZ can", "1 LITER") is None
        assert extract_volume("1.5 L bottle", "1 L") is None

    def test_no_expected_value(self):
        """Test volume checking needs a declared value."""
        assert extract_volume("12 FL OZ beer") is None
        assert extract_volume("12 FL OZ beer", "") is None

    def test_expected_without_number(self):
        """Test declared value with no number and no literal match."""
        assert extract_volume("half gallon jug", "a pint") is None


class TestGovernmentWarning:
    """Test government warning detection."""

    def test_warning_found(self):
        """Test the mandatory heading is found."""
        result = check_government_warning("This product contains GOVERNMENT WARNING alcohol")
        assert result.found is True
        assert result.matched_snippet == "GOVERNMENT WARNING"

    def test_lowercase(self):
        """Test detection is case-insensitive and keeps original casing."""
        result = check_government_warning("government warning text here")
        assert result.found is True
        assert result.matched_snippet == "government warning"

    def test_split_across_lines(self):
        """Test heading broken over two OCR lines."""
        result = check_government_warning("GOVERNMENT\nWARNING: (1) According to")
        assert result.found is True

    def test_partial_phrase(self):
        """Test a fragment of the statement is enough."""
        result = check_government_warning("...ACCORDING TO THE SURGEON GENERAL, WOMEN...")
        assert result.found is True
        assert result.matched_snippet == "SURGEON GENERAL"

    def test_french_warning(self):
        """Test European wording."""
        result = check_government_warning("L'abus d'alcool est dangereux pour la santé")
        assert result.found is True
        assert result.matched_snippet == "L'abus d'alcool est dangereux"

    def test_first_pattern_wins(self):
        """Test pattern order decides the snippet, not text position."""
        result = check_government_warning("Drink responsibly. GOVERNMENT WARNING")
        assert result.matched_snippet == "GOVERNMENT WARNING"

    def test_not_found(self):
        """Test text with no warning."""
        result = check_government_warning("no warning")
        assert result.found is False
        assert result.matched_snippet is None

    def test_empty(self):
        """Test empty text."""
        assert check_government_warning("").found is False


class TestBrandName:
    """Test brand name extraction."""

    def test_exact(self):
        """Test brand present."""
        assert extract_brand_name("Budweiser Beer", "Budweiser") == "Budweiser"

    def test_case_insensitive(self):
        """Test different casing returns the declared value."""
        assert extract_brand_name("budweiser premium beer", "Budweiser") == "Budweiser"

    def test_multi_line(self):
        """Test brand split over lines."""
        assert extract_brand_name("OLD TOM\nDISTILLERY", "Old Tom Distillery") == "Old Tom Distillery"

    def test_ocr_misread(self):
        """Test single-glyph misreads are tolerated."""
        assert extract_brand_name("BUDWE1SER LAGER", "Budweiser") == "Budweiser"

    def test_not_found(self):
        """Test a different brand."""
        assert extract_brand_name("Coors Light", "Budweiser") is None

    def test_short_brand_not_fuzzy(self):
        """Test short brands need a real match."""
        assert extract_brand_name("Bear Ale", "Beer") is None

    def test_one_letter_difference_accepted(self):
        """Test a brand one glyph away is accepted even when it is another brand."""
        assert extract_brand_name("Killer Lite Beer", "Miller") == "Miller"
        assert extract_brand_name("Carona Extra", "Corona") == "Corona"

    def test_two_letter_difference_rejected(self):
        """Test brands differing in two of five letters do not match."""
        assert extract_brand_name("Cobra Lager", "Coors") is None

    def test_short_label_word_not_fuzzy(self):
        """Test a short word on the label cannot stand in for the brand."""
        assert extract_brand_name("Premium Beer", "Coors") is None

    def test_no_expected(self):
        """Test no open-ended discovery."""
        assert extract_brand_name("Budweiser Beer") is None
        assert extract_brand_name("Budweiser Beer", "") is None


class TestProductClass:
    """Test product class extraction."""

    def test_exact(self):
        """Test class present."""
        assert extract_product_class("Premium Beer product", "Beer") == "Beer"
        assert extract_product_class("premium beer here", "Beer") == "Beer"

    def test_multi_word(self):
        """Test multi-word classes."""
        assert extract_product_class("Malt Beverage here", "Malt Beverage") == "Malt Beverage"
        assert extract_product_class("Distilled spirits", "Distilled Spirits") == "Distilled Spirits"

    def test_word_subset_fallback(self):
        """Test words in a different order still match."""
        text = "Whiskey, Straight Bourbon"
        assert extract_product_class(text, "Bourbon Whiskey") == "Bourbon Whiskey"

    def test_contained_in_longer_class(self):
        """Test declared class inside a longer designation."""
        text = "KENTUCKY STRAIGHT BOURBON WHISKEY"
        assert extract_product_class(text, "Bourbon Whiskey") == "Bourbon Whiskey"

    def test_not_found(self):
        """Test a different class."""
        assert extract_product_class("Wine product", "Beer") is None

    def test_no_expected(self):
        """Test no open-ended discovery."""
        assert extract_product_class("Beer product") is None
