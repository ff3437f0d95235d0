"""Tests for the slug codec."""

import pytest

from product_resolver.slug import decode_slug, encode_slug, kebab, split_title, title_from_slug


class TestEncodeSlug:
    """Tests for encode_slug."""

    def test_two_part_slug(self):
        """Test base name and color are kebab-cased and joined."""
        assert encode_slug("Swivel Allure", "Black", "PROD123") == "swivel-allure---black_PROD123"

    def test_multi_word_color(self):
        """Test whitespace inside the color is hyphenated."""
        assert encode_slug("Lounge Set", "Navy  Blue", "9") == "lounge-set---navy-blue_9"

    def test_one_part_slug_without_color(self):
        """Test the color separator is omitted when color is absent."""
        assert encode_slug("Swivel Allure", None, "PROD123") == "swivel-allure_PROD123"
        assert encode_slug("Swivel Allure", "", "PROD123") == "swivel-allure_PROD123"


class TestDecodeSlug:
    """Tests for decode_slug."""

    def test_two_part_slug(self):
        """Test the documented two-part scenario."""
        slug = decode_slug("swivel-allure---black_PROD123")

        assert slug.base_name == "swivel-allure"
        assert slug.color == "black"
        assert slug.id == "PROD123"

    def test_one_part_slug(self):
        """Test a slug with only a name and an id."""
        slug = decode_slug("swivel-allure_PROD123")

        assert slug.base_name == "swivel-allure"
        assert slug.color is None
        assert slug.id == "PROD123"

    def test_id_is_last_underscore_segment(self):
        """Test underscores in the name part stay in the base name."""
        slug = decode_slug("big_chair_77")

        assert slug.base_name == "big_chair"
        assert slug.id == "77"

    def test_bare_id(self):
        """Test a slug with no separators is treated as an id."""
        slug = decode_slug("8123456789")

        assert slug.id == "8123456789"
        assert slug.base_name is None
        assert slug.color is None

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_slug(self, value):
        """Test empty input decodes to an all-empty triple."""
        slug = decode_slug(value)
        assert (slug.base_name, slug.color, slug.id) == (None, None, None)

    @pytest.mark.parametrize("value", ["_", "---_", "name---_", "_42"])
    def test_malformed_slugs_never_raise(self, value):
        """Test malformed slugs give partial results instead of errors."""
        decode_slug(value)


class TestRoundTrip:
    """Round-trip properties of the codec."""

    @pytest.mark.parametrize(
        ("base_name", "color", "product_id"),
        [
            ("Swivel Allure", "Black", "PROD123"),
            ("Crimson Allure", "Dusty Rose", "8"),
            ("lounge", "OLIVE", "gid-55"),
        ],
    )
    def test_with_color(self, base_name, color, product_id):
        """Test decode(encode(...)) recovers kebab-cased parts."""
        slug = decode_slug(encode_slug(base_name, color, product_id))

        assert slug.base_name == kebab(base_name)
        assert slug.color == kebab(color)
        assert slug.id == product_id

    def test_without_color(self):
        """Test the one-part form round-trips with no color."""
        slug = decode_slug(encode_slug("Swivel Allure", None, "PROD123"))

        assert slug.base_name == "swivel-allure"
        assert slug.color is None
        assert slug.id == "PROD123"


class TestNamingHelpers:
    """Tests for title splitting and page titles."""

    def test_split_title(self):
        """Test titles split on the first ' - '."""
        assert split_title("Swivel Allure - Black") == ("Swivel Allure", "Black")
        assert split_title("Swivel Allure") == ("Swivel Allure", None)
        assert split_title("") == ("", None)

    def test_title_from_slug(self):
        """Test a readable title is rebuilt from the slug."""
        assert title_from_slug("swivel-allure---black_PROD123") == "Swivel Allure Black"
        assert title_from_slug("PROD123") == ""
