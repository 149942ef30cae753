"""Text helpers that make unit strings safe for the conversion backend.

Custom units are carried through string processing wrapped in ``<`` and
``>``. Micro-prefixed units (``µm``) are rewritten to bracketed
placeholders such as ``<microfrogm>`` because the micro glyphs are not
reliably understood by the backend.
"""

from __future__ import annotations

import re
from typing import Iterable

# Glyph -> marker embedded in the placeholder, so untagging restores the
# exact glyph that was tagged.
MICRO_SYMBOLS: dict[str, str] = {
    "\u00b5": "",  # MICRO SIGN
    "\u03bc": "mu",  # GREEK SMALL LETTER MU
    "\U0001d707": "it",  # MATHEMATICAL ITALIC SMALL MU
    "\U0001d741": "bi",  # MATHEMATICAL BOLD ITALIC SMALL MU
}
MICRO_SIGN = "\u00b5"

_MICRO_PATTERN = re.compile("[" + "".join(MICRO_SYMBOLS) + "]([a-zA-Z]+)")
_MARKER_TO_SYMBOL = {marker: symbol for symbol, marker in MICRO_SYMBOLS.items()}
_TAGGED_MICRO_PATTERN = re.compile(
    r"<micro(" + "|".join(sorted(filter(None, _MARKER_TO_SYMBOL), key=len, reverse=True)) + r")?frog([a-zA-Z]+)>"
)
_TAG_PATTERN = re.compile(r"<([^>]*)>")
_NESTED_INVERSE_PATTERN = re.compile(r"1/\((1/.*?)\)")
_SIMPLE_INVERSE_PATTERN = re.compile(r"1/([a-zA-Z]+)")


def _micro_placeholder(match_text: str) -> str:
    marker = MICRO_SYMBOLS[match_text[0]]
    return f"<micro{marker}frog{match_text[1:]}>"


def canonicalize_micro_symbols(units_string: str) -> str:
    """Replace every recognised micro glyph by the MICRO SIGN."""

    for symbol in MICRO_SYMBOLS:
        if symbol != MICRO_SIGN:
            units_string = units_string.replace(symbol, MICRO_SIGN)
    return units_string


def tag_micro_units(units_string: str) -> str:
    """Rewrite ``µX`` units to ``<microfrogX>`` placeholders."""

    if not any(symbol in units_string for symbol in MICRO_SYMBOLS):
        return units_string
    found = [match.group(0) for match in _MICRO_PATTERN.finditer(units_string)]
    # Longest first so ``µm`` never clobbers part of ``µmol``.
    for match_text in sorted(set(found), key=len, reverse=True):
        units_string = units_string.replace(match_text, _micro_placeholder(match_text))
    return units_string


def untag_micro_units(units_string: str) -> str:
    """Inverse of :func:`tag_micro_units`."""

    if "<micro" not in units_string:
        return units_string
    return _TAGGED_MICRO_PATTERN.sub(
        lambda match: _MARKER_TO_SYMBOL[match.group(1) or ""] + match.group(2),
        units_string,
    )


def micro_tag_suffix(tag: str) -> str | None:
    """Return the unit letters of a bare micro placeholder such as ``microfrogm``."""

    match = _TAGGED_MICRO_PATTERN.fullmatch(f"<{tag}>")
    return match.group(2) if match else None


def extract_tagged_strings(text: str) -> list[str]:
    """Return the unique ``<...>`` tags in ``text``, longest first."""

    tags = list(dict.fromkeys(_TAG_PATTERN.findall(text)))
    return sorted(tags, key=len, reverse=True)


def remove_tagged_strings(text: str) -> str:
    """Strip the ``<`` and ``>`` delimiters, keeping the tag contents."""

    return _TAG_PATTERN.sub(r"\1", text)


def return_custom_units_markup(units_string: str, custom_units: Iterable[str]) -> str:
    """Wrap whole-word occurrences of ``custom_units`` in ``<...>`` markup."""

    for custom_unit in sorted(set(custom_units), key=len, reverse=True):
        if not custom_unit:
            continue
        pattern = re.compile(r"(?<![\w<])" + re.escape(custom_unit) + r"(?![\w>])")
        units_string = pattern.sub(f"<{custom_unit}>", units_string)
    return units_string


def convert_inverse_units(expression: str, depth: int = 100) -> str:
    """Rewrite ``1/X`` and ``1/(1/X)`` as ``(X)**(-1)`` until nothing changes.

    At most ``depth`` passes are made.
    """

    current = expression
    for _ in range(depth):
        updated = _NESTED_INVERSE_PATTERN.sub(r"(\1)**(-1)", current)
        updated = _SIMPLE_INVERSE_PATTERN.sub(r"(\1)**(-1)", updated)
        if updated == current:
            break
        current = updated
    return current


def separate_label_text_from_units(label: str | None) -> tuple[str, str]:
    """Split ``"name (unit)"`` into ``("name", "unit")``.

    The unit spans from the first ``(`` to the last ``)`` so nested
    parentheses such as ``"Cp (J/(mol*K))"`` survive. A label without
    parentheses has an empty unit.
    """

    if not label:
        return "", ""
    text = label.strip()
    start = text.find("(")
    end = text.rfind(")")
    if start == -1 or end < start:
        return text, ""
    return text[:start].strip(), text[start + 1 : end].strip()


__all__ = [
    "MICRO_SIGN",
    "MICRO_SYMBOLS",
    "canonicalize_micro_symbols",
    "convert_inverse_units",
    "extract_tagged_strings",
    "micro_tag_suffix",
    "remove_tagged_strings",
    "return_custom_units_markup",
    "separate_label_text_from_units",
    "tag_micro_units",
    "untag_micro_units",
]
