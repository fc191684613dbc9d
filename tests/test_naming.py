"""
tests/test_naming.py
Unit tests for modelbake.naming (the naming oracle).

Tests cover:
- snake_case / PascalCase conversion
- Singular / plural inflection, irregular and uncountable nouns
- Table <-> model <-> foreign-key conversions
- The foreign-key consistency property over conventional table names
"""

from __future__ import annotations

import pytest

from modelbake.naming import (
    foreign_key_from_model,
    model_name_from_foreign_key,
    model_name_from_table,
    safe_identifier,
    table_from_model,
    to_attribute_name,
    to_pascal_case,
    to_plural,
    to_singular,
    to_snake_case,
)


# ===========================================================================
# Case conversion
# ===========================================================================


class TestCaseConversion:
    """Tests for snake_case and PascalCase helpers."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("BlogPost", "blog_post"),
            ("blog_post", "blog_post"),
            ("getHTTPResponse", "get_http_response"),
            ("Blog Post", "blog_post"),
            ("", ""),
        ],
    )
    def test_to_snake_case(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("blog_post", "BlogPost"),
            ("author", "Author"),
            ("http_response", "HttpResponse"),
        ],
    )
    def test_to_pascal_case(self, name: str, expected: str) -> None:
        assert to_pascal_case(name) == expected


# ===========================================================================
# Inflection
# ===========================================================================


class TestInflection:
    """Tests for singular/plural inflection of the last word."""

    @pytest.mark.parametrize(
        "plural, singular",
        [
            ("posts", "post"),
            ("categories", "category"),
            ("boxes", "box"),
            ("people", "person"),
            ("statuses", "status"),
            ("blog_posts", "blog_post"),
            ("news", "news"),
            ("i18n", "i18n"),
        ],
    )
    def test_to_singular(self, plural: str, singular: str) -> None:
        assert to_singular(plural) == singular

    @pytest.mark.parametrize("word", ["post", "category", "status", "address", "person"])
    def test_singular_is_idempotent(self, word: str) -> None:
        assert to_singular(word) == word
        assert to_singular(to_singular(word)) == word

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("post", "posts"),
            ("category", "categories"),
            ("box", "boxes"),
            ("person", "people"),
            ("blog_post", "blog_posts"),
            ("day", "days"),
        ],
    )
    def test_to_plural(self, singular: str, plural: str) -> None:
        assert to_plural(singular) == plural


# ===========================================================================
# Table / model / foreign key
# ===========================================================================


class TestConversions:
    """Tests for the table, model and foreign-key conversions."""

    def test_model_name_from_table(self) -> None:
        assert model_name_from_table("blog_posts") == "BlogPost"
        assert model_name_from_table("categories") == "Category"
        assert model_name_from_table("people") == "Person"

    def test_model_name_from_foreign_key(self) -> None:
        assert model_name_from_foreign_key("author_id") == "Author"
        assert model_name_from_foreign_key("blog_post_id") == "BlogPost"

    def test_foreign_key_from_model(self) -> None:
        assert foreign_key_from_model("Author") == "author_id"
        assert foreign_key_from_model("BlogPost") == "blog_post_id"

    def test_foreign_key_from_table_name(self) -> None:
        assert foreign_key_from_model("posts") == "post_id"

    def test_table_from_model(self) -> None:
        assert table_from_model("BlogPost") == "blog_posts"
        assert table_from_model("Category") == "categories"
        assert table_from_model("Person") == "people"

    @pytest.mark.parametrize(
        "table",
        [
            "authors", "posts", "blog_posts", "categories", "tags", "user_groups", "boxes",
            "movies", "cookies",
        ],
    )
    def test_foreign_key_consistency(self, table: str) -> None:
        model = model_name_from_table(table)
        assert foreign_key_from_model(model) == to_singular(table) + "_id"

    @pytest.mark.parametrize(
        "table, expected",
        [("movies", "movie_id"), ("cookies", "cookie_id"), ("ties", "tie_id"), ("zombies", "zombie_id")],
    )
    def test_ie_nouns_keep_their_e(self, table: str, expected: str) -> None:
        assert foreign_key_from_model(model_name_from_table(table)) == expected
        assert table_from_model(model_name_from_table(table)) == table

    @pytest.mark.parametrize("table", ["authors", "blog_posts", "categories"])
    def test_table_round_trip(self, table: str) -> None:
        assert table_from_model(model_name_from_table(table)) == table


# ===========================================================================
# Identifiers
# ===========================================================================


class TestIdentifiers:
    """Tests for Python-safe attribute names."""

    def test_attribute_name_singular(self) -> None:
        assert to_attribute_name("ParentCategory") == "parent_category"

    def test_attribute_name_plural(self) -> None:
        assert to_attribute_name("Tag", plural=True) == "tags"
        assert to_attribute_name("ChildCategory", plural=True) == "child_categories"

    def test_keyword_gets_suffix(self) -> None:
        assert safe_identifier("class") == "class_"

    def test_leading_digit_gets_prefix(self) -> None:
        assert safe_identifier("2fa_code") == "_2fa_code"

    def test_invalid_characters_replaced(self) -> None:
        assert safe_identifier("first-name") == "first_name"
