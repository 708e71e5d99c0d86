"""Unit tests for the style catalog."""

import json

import pytest

from filterstudio.catalog import StyleCatalog, load_styles_from_file


class TestLoadStyles:
    """Tests for loading styles.json."""

    def test_shipped_catalog(self):
        """Test that the bundled catalog loads with every expected style."""
        catalog = StyleCatalog.from_file()

        expected = {
            "que-paso-ayer-fiesta", "chibi-sticker", "figure-collector", "buzz-cut-street",
            "film-noir-portrait", "editorial-portrait", "ghibli-classic", "ghibli-style",
            "lego-collection", "polaroid-chibi", "yarn-doll", "pencil-sketch", "instagram-chibi",
        }
        assert {s.id for s in catalog.all()} == expected
        assert catalog.get("que-paso-ayer-fiesta").required_images == ["person", "celebrity"]
        assert catalog.get("chibi-sticker").required_images == ["person"]

    def test_legacy_routes(self):
        """Test lookup by the original per-style endpoint names."""
        catalog = StyleCatalog.from_file()

        assert catalog.by_route("generate").id == "que-paso-ayer-fiesta"
        assert catalog.by_route("generate-chibi").id == "chibi-sticker"
        assert catalog.by_route("generate-figure").id == "figure-collector"
        assert catalog.by_route("generate-unknown") is None

    def test_missing_file(self, tmp_path):
        """Test that a missing catalog raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_styles_from_file(tmp_path / "nope.json")

    def test_invalid_role(self, tmp_path):
        """Test that unknown image roles are rejected."""
        path = tmp_path / "styles.json"
        path.write_text(json.dumps({"styles": [
            {"id": "x", "name": "X", "prompt_template": "p", "required_images": ["pet"]}
        ]}))

        with pytest.raises(ValueError, match="invalid image roles"):
            load_styles_from_file(path)


class TestDisplayFields:
    """Tests for presentation-only display fields."""

    def test_fixed_title_and_field_subtitle(self, single_style):
        fields = single_style.display_fields({"theme": "kawaii"})

        assert fields == {
            "displayTitle": "Chibi Sticker Pack",
            "displaySubtitle": "kawaii",
            "displayType": "9 Stickers Pack",
        }

    def test_subtitle_default(self, single_style):
        assert single_style.display_fields({})["displaySubtitle"] == "kawaii"

    def test_title_from_field(self, duo_style):
        assert duo_style.display_fields({"celebrityName": "Cher"})["displayTitle"] == "Cher"
        assert duo_style.display_fields({})["displayTitle"] == "No celebrity"
        assert duo_style.display_fields({})["displaySubtitle"] == "Epic party"
