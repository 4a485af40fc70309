"""Unit tests for slug generation."""

import re

import pytest

from app.utils.slug import derive_season_slug, generate_slug, next_available_slug


class TestGenerateSlug:
    """Tests for generate_slug."""

    def test_basic_name(self):
        assert generate_slug("Miss Himalaya Nepal") == "miss-himalaya-nepal"

    def test_accents_are_folded(self):
        assert generate_slug("Señorita Élite") == "senorita-elite"

    def test_special_characters_removed(self):
        assert generate_slug("Mr. & Mrs. Nepal!!") == "mr-mrs-nepal"

    def test_underscores_and_runs_of_spaces(self):
        assert generate_slug("  face__of   the_year ") == "face-of-the-year"

    def test_empty(self):
        assert generate_slug("") == ""


class TestDeriveSeasonSlug:
    """Tests for derive_season_slug."""

    def test_appends_year(self):
        assert derive_season_slug("Miss Nepal", 2025) == "miss-nepal-2025"

    @pytest.mark.parametrize(
        "name", ["Miss Nepal", "Mr. Nepal (Int'l)", "Élite Model Look", "ÆØÅ ★ Show", "!!!"]
    )
    def test_idempotent_and_clean(self, name):
        first = derive_season_slug(name, 2024)
        second = derive_season_slug(name, 2024)

        assert first == second
        assert re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", first)

    def test_unusable_name_falls_back(self):
        assert derive_season_slug("★★★", 2025) == "season-2025"


def test_next_available_slug():
    assert next_available_slug("miss-nepal-2025", set()) == "miss-nepal-2025"
    assert (
        next_available_slug("miss-nepal-2025", {"miss-nepal-2025", "miss-nepal-2025-2"})
        == "miss-nepal-2025-3"
    )
