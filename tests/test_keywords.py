"""Tests for color extraction, category groups and description parsing."""

from reclaim.matching.keywords import (
    category_group,
    extract_colors,
    extract_keywords,
    is_category_similar,
    parse_description,
)


class TestExtractColors:
    def test_vocabulary_order(self):
        assert extract_colors("Space Gray iPhone with a blue case") == ["blue", "gray"]

    def test_case_insensitive(self):
        assert extract_colors("BLACK leather") == ["black"]

    def test_substring_containment(self):
        # "red" is contained in "covered"
        assert "red" in extract_colors("covered in stickers")

    def test_empty(self):
        assert extract_colors("") == []
        assert extract_colors(None) == []

    def test_no_colors(self):
        assert extract_colors("leather wallet with cards") == []


class TestCategoryGroups:
    def test_group_lookup(self):
        assert category_group("Phone") == "electronics"
        assert category_group("wallet") == "accessories"
        assert category_group("Jacket") == "clothing"
        assert category_group("Books") is None
        assert category_group("") is None

    def test_same_group(self):
        assert is_category_similar("phone", "laptop")
        assert is_category_similar("Wallet", "keys")

    def test_different_groups(self):
        assert not is_category_similar("phone", "wallet")

    def test_ungrouped_never_similar(self):
        assert not is_category_similar("books", "books")
        assert not is_category_similar(None, "phone")


class TestExtractKeywords:
    def test_full_description(self):
        kw = extract_keywords("Lost my black wallet near the cafeteria yesterday. It is old.")
        assert kw.colors == ["black"]
        assert kw.item_types == ["wallet"]
        assert kw.locations == ["the cafeteria yesterday"]
        assert kw.times == ["yesterday"]
        assert kw.conditions == ["old"]
        assert "wallet" in kw.keywords
        assert "my" not in kw.keywords

    def test_damaged(self):
        assert extract_keywords("screen is broken").conditions == ["damaged"]

    def test_empty(self):
        kw = extract_keywords(None)
        assert kw.colors == [] and kw.keywords == []


class TestParseDescription:
    def test_defaults(self):
        result = parse_description("")
        assert result.item_type == "item"
        assert result.time_frame == "recently"
        assert result.condition == "unknown"
        assert result.confidence == 0

    def test_confidence(self):
        result = parse_description("red phone and blue bag")
        # 2 colors + 2 item types
        assert result.confidence == 100
        assert result.item_type == "phone"

    def test_confidence_partial(self):
        assert parse_description("a green umbrella").confidence == 50
