# File: modelbake/naming.py
"""
modelbake - Naming Oracle
==========================
Pure string transforms between table names, model (class) names and
foreign-key column names.  No I/O, no side effects.

    model_name_from_table("blog_posts")   -> "BlogPost"
    model_name_from_foreign_key("author_id") -> "Author"
    foreign_key_from_model("Author")      -> "author_id"
    table_from_model("BlogPost")          -> "blog_posts"

All conversions are ``@lru_cache``d: inference calls them once per
(table, column) pair while scanning sibling tables.

Known limitations
-----------------
Inflection is rule based.  Only the last word of a snake_case name is
inflected, irregular nouns are limited to ``_IRREGULAR_PLURALS`` and
uncountable nouns to ``_UNCOUNTABLE``.  Anything else (``"knives"``,
``"octopi"``, acronyms such as ``"URLs"``) inflects by the generic suffix
rules and may produce an unconventional model name.  That is accepted: the
heuristics are approximate by nature.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Callable, Dict, FrozenSet, List, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.naming")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)

FOREIGN_KEY_SUFFIX: str = "_id"

# ---------------------------------------------------------------------------
# Inflection tables
# ---------------------------------------------------------------------------

_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "leaf": "leaves",
    "life": "lives",
    "wife": "wives",
    "knife": "knives",
    "half": "halves",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
    "criterion": "criteria",
    "status": "statuses",
    "address": "addresses",
    "alias": "aliases",
    "bus": "buses",
    "campus": "campuses",
    "virus": "viruses",
    "hero": "heroes",
    "potato": "potatoes",
    "tomato": "tomatoes",
}

_IRREGULAR_SINGULARS: Dict[str, str] = {v: k for k, v in _IRREGULAR_PLURALS.items()}

# Nouns ending in "ie"; their plurals must not fall into the "ies" -> "y" rule.
_IE_NOUNS: FrozenSet[str] = frozenset({
    "brownie",
    "calorie",
    "cookie",
    "genie",
    "goalie",
    "lie",
    "movie",
    "pie",
    "rookie",
    "selfie",
    "tie",
    "zombie",
})

_UNCOUNTABLE: FrozenSet[str] = frozenset({
    "data",
    "equipment",
    "fish",
    "i18n",
    "information",
    "media",
    "metadata",
    "money",
    "news",
    "rice",
    "series",
    "sheep",
    "species",
})

# Python keywords that cannot be used as identifiers
_PYTHON_KEYWORDS: FrozenSet[str] = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else",
    "except", "finally", "for", "from", "global", "if", "import",
    "in", "is", "lambda", "nonlocal", "not", "or", "pass", "raise",
    "return", "try", "while", "with", "yield",
})


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("BlogPost")
        'blog_post'
        >>> to_snake_case("getHTTPResponse")
        'get_http_response'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split any casing style into lowercase words."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

    Examples:
        >>> to_pascal_case("blog_post")
        'BlogPost'
        >>> to_pascal_case("http_response")
        'HttpResponse'
    """
    if not name:
        return ""
    return "".join(word.capitalize() for word in _extract_words(name))


# ---------------------------------------------------------------------------
# Inflection
# ---------------------------------------------------------------------------


def _match_case(template: str, word: str) -> str:
    if template[:1].isupper():
        return word[:1].upper() + word[1:]
    return word


def _singular_word(word: str) -> str:
    lower: str = word.lower()

    if lower in _UNCOUNTABLE or lower in _IRREGULAR_PLURALS:
        return word
    if lower in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower])

    if lower.endswith("ies") and lower[:-1] in _IE_NOUNS:
        return word[:-1]
    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if lower.endswith(("us", "is", "ss")):
        return word
    if lower.endswith("s") and len(lower) > 1:
        return word[:-1]
    return word


def _plural_word(word: str) -> str:
    lower: str = word.lower()

    if lower in _UNCOUNTABLE or lower in _IRREGULAR_SINGULARS:
        return word
    if lower in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower])
    if lower in _IE_NOUNS:
        return word + "s"

    # Already plural-looking
    if lower.endswith("s") and not lower.endswith(("ss", "us", "is")):
        return word

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def _inflect_last_word(name: str, inflect: Callable[[str], str]) -> str:
    head, sep, last = name.rpartition("_")
    if not last:
        return name
    return f"{head}{sep}{inflect(last)}"


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """
    Singularise the last word of a snake_case (or single-word) name.

    Singular input is returned unchanged, so the function is idempotent.

    Examples:
        >>> to_singular("blog_posts")
        'blog_post'
        >>> to_singular("categories")
        'category'
        >>> to_singular("status")
        'status'
    """
    if not name:
        return ""
    return _inflect_last_word(name, _singular_word)


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Pluralise the last word of a snake_case (or single-word) name.

    Examples:
        >>> to_plural("blog_post")
        'blog_posts'
        >>> to_plural("category")
        'categories'
        >>> to_plural("person")
        'people'
    """
    if not name:
        return ""
    return _inflect_last_word(name, _plural_word)


# ---------------------------------------------------------------------------
# Table / model / foreign-key conversions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def model_name_from_table(table: str) -> str:
    """Singularise and PascalCase a table name: ``blog_posts`` → ``BlogPost``."""
    return to_pascal_case(to_singular(to_snake_case(table)))


@functools.lru_cache(maxsize=None)
def model_name_from_foreign_key(column: str) -> str:
    """Strip a trailing ``_id`` and map to a model: ``author_id`` → ``Author``."""
    stem: str = column
    if stem.endswith(FOREIGN_KEY_SUFFIX) and len(stem) > len(FOREIGN_KEY_SUFFIX):
        stem = stem[: -len(FOREIGN_KEY_SUFFIX)]
    return model_name_from_table(stem)


@functools.lru_cache(maxsize=None)
def foreign_key_from_model(model: str) -> str:
    """
    Conventional foreign-key column for a model: ``Author`` → ``author_id``.

    Table names are accepted too (``posts`` → ``post_id``) because the
    name is singularised first.
    """
    return to_singular(to_snake_case(model)) + FOREIGN_KEY_SUFFIX


@functools.lru_cache(maxsize=None)
def table_from_model(model: str) -> str:
    """Conventional table for a model: ``BlogPost`` → ``blog_posts``."""
    return to_plural(to_snake_case(model))


@functools.lru_cache(maxsize=None)
def to_attribute_name(name: str, plural: bool = False) -> str:
    """
    Python attribute name for an association alias.

    Examples:
        >>> to_attribute_name("ParentCategory")
        'parent_category'
        >>> to_attribute_name("Tag", plural=True)
        'tags'
    """
    attr: str = to_snake_case(name)
    if plural:
        attr = to_plural(attr)
    return safe_identifier(attr)


@functools.lru_cache(maxsize=None)
def safe_identifier(name: str) -> str:
    """
    Make a column or alias name usable as a Python identifier.

    Prefixes an underscore when it starts with a digit and appends one
    when it collides with a keyword.
    """
    result: str = _NON_ALPHANUM_RE.sub("_", name)
    if not result:
        return "_unnamed"
    if result[0].isdigit():
        result = f"_{result}"
    if result in _PYTHON_KEYWORDS:
        result = f"{result}_"
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FOREIGN_KEY_SUFFIX",
    "to_snake_case",
    "to_pascal_case",
    "to_singular",
    "to_plural",
    "model_name_from_table",
    "model_name_from_foreign_key",
    "foreign_key_from_model",
    "table_from_model",
    "to_attribute_name",
    "safe_identifier",
]

logger.debug("modelbake.naming loaded: %d public symbols.", len(__all__))
