"""
Name inflection helpers used for table, class and file names.

Covers the handful of English rules needed to turn model names into
table names (``BlogPost`` -> ``blog_posts``, ``Category`` -> ``categories``)
and migration names into class names (``create_users`` -> ``CreateUsers``).
"""

from __future__ import annotations

import re

_UNCOUNTABLE = frozenset({
    "equipment", "information", "rice", "money", "species",
    "series", "fish", "sheep", "news", "metadata", "data",
})

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "ox": "oxen",
}

_PLURAL_RULES = [
    (re.compile(r"(quiz)$", re.I), r"\1zes"),
    (re.compile(r"(matr|vert|ind)(?:ix|ex)$", re.I), r"\1ices"),
    (re.compile(r"(x|ch|ss|sh|z)$", re.I), r"\1es"),
    (re.compile(r"([^aeiouy])y$", re.I), r"\1ies"),
    (re.compile(r"(?:([^f])fe|([lr])f)$", re.I), r"\1\2ves"),
    (re.compile(r"(bu|statu|alia)s$", re.I), r"\1ses"),
    (re.compile(r"(octop|vir)us$", re.I), r"\1i"),
    (re.compile(r"(ax|test)is$", re.I), r"\1es"),
    (re.compile(r"s$", re.I), "s"),
    (re.compile(r"$"), "s"),
]

_CAMEL_BOUNDARY_1 = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY_2 = re.compile(r"([a-z\d])([A-Z])")
_NON_WORD = re.compile(r"[^A-Za-z0-9]+")


def underscore(word: str) -> str:
    """``BlogPost`` -> ``blog_post``; ``HTTPRequest`` -> ``http_request``."""
    word = _CAMEL_BOUNDARY_1.sub(r"\1_\2", word)
    word = _CAMEL_BOUNDARY_2.sub(r"\1_\2", word)
    word = _NON_WORD.sub("_", word)
    return word.strip("_").lower()


def camelize(word: str) -> str:
    """``create_users`` -> ``CreateUsers``; free text is split on non-word characters."""
    parts = [p for p in _NON_WORD.split(word.replace("_", " ")) if p]
    return "".join(p[:1].upper() + p[1:] for p in parts)


def pluralize(word: str) -> str:
    """Pluralize the last ``_``-separated segment of ``word``."""
    if not word:
        return word

    head, sep, last = word.rpartition("_")
    lower = last.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
        if last[:1].isupper():
            plural = plural.capitalize()
        return f"{head}{sep}{plural}"

    for pattern, replacement in _PLURAL_RULES:
        if pattern.search(last):
            return f"{head}{sep}{pattern.sub(replacement, last, count=1)}"
    return word


def tableize(class_name: str) -> str:
    """``BlogPost`` -> ``blog_posts``."""
    return pluralize(underscore(class_name))
