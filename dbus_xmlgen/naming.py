"""Identifier transformation from D-Bus names to Python names"""

import re
from enum import Enum
from typing import Iterable, Sequence

from .errors import NamingError

# Acronym runs ("DBus" -> D, Bus), capitalized words, lowercase words and
# digit runs. Anything else separates words.
_WORD_RE = re.compile(r'[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+\d*|[A-Z]+\d*|\d+')

# Hard keywords, pinned so output does not change between interpreter versions
PYTHON_KEYWORDS = frozenset([
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
])


class Style(Enum):
    TYPE = "type"      # CapWords
    VALUE = "value"    # lower_snake_case


def split_words(name: str) -> list[str]:
    return _WORD_RE.findall(name)


def _join(words: Sequence[str], style: Style) -> str:
    if style is Style.TYPE:
        if words[0][0].isdigit():
            words = ["Type", *words]
        return "".join(w[0].upper() + w[1:].lower() for w in words)
    if words[0][0].isdigit():
        words = ["arg", *words]
    return "_".join(w.lower() for w in words)


def transform(name: str, style: Style, prefix: Sequence[str] = ()) -> str:
    """Turn a wire name into an identifier in the given style"""
    words = split_words(name)
    if not words:
        raise NamingError(f"{name!r} does not contain any identifier characters", name)
    return _join([*prefix, *words], style)


def to_type_name(name: str) -> str:
    return transform(name, Style.TYPE)


def to_value_name(name: str, prefix: Sequence[str] = ()) -> str:
    return transform(name, Style.VALUE, prefix)


class NameScope:
    """Hands out unique identifiers within one Python namespace

    Results only depend on the sequence of claims, so regenerating the same
    document always yields the same names.
    """

    def __init__(self, label: str, reserved: Iterable[str] = ()):
        self.label = label
        self.reserved = frozenset(reserved)
        self._owners: dict[str, str] = {}
        self._claimed: dict[str, str] = {}

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._owners

    def _taken(self, identifier: str) -> bool:
        return identifier in self._owners or identifier in self.reserved

    def claim(self, wire_name: str, style: Style, source: str,
              prefix: Sequence[str] = ()) -> str:
        """Return the identifier for ``wire_name`` and record it as taken

        ``source`` names the document item the identifier stands for; the
        same source may only be claimed once per scope.
        """
        if source in self._claimed:
            raise NamingError(
                f"{self.label}: {source!r} conflicts with {source!r} declared earlier",
                source, source)

        base = transform(wire_name, style, prefix)
        if base in PYTHON_KEYWORDS or base in self.reserved:
            base += "_"

        candidate = base
        counter = 2
        sep = "" if style is Style.TYPE else "_"
        while self._taken(candidate):
            candidate = f"{base}{sep}{counter}"
            counter += 1

        self._owners[candidate] = source
        self._claimed[source] = candidate
        return candidate
