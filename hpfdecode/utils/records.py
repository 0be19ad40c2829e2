"""Descriptive records embedded in HPF chunks.

Header, channel-info and event-definition chunks carry a small XML document.
This module turns such a document into plain (field name, text) pairs and
converts field text into typed values against a fixed vocabulary.
"""

from __future__ import annotations

import re
from typing import Any, Callable
from xml.etree import ElementTree as ET

from hpfdecode.errors import (
    MissingFieldError,
    MissingRootElementError,
    UnknownFieldError,
    UnsupportedFieldValueError,
    WrongRootElementError,
)

# --- Document access ---


def parse(text: str) -> ET.Element:
    """Parse a descriptive document and return its root element."""
    if not text.strip():
        raise MissingRootElementError("descriptive record is empty")
    try:
        return ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as e:
        raise MissingRootElementError(f"descriptive record is not well-formed: {e}")


def expect_root(text: str, tag: str) -> ET.Element:
    """Parse text and require the root element to be ``tag``."""
    root = parse(text)
    if root.tag != tag:
        raise WrongRootElementError(f"expected root <{tag}>, found <{root.tag}>")
    return root


def element_text(element: ET.Element) -> str:
    return (element.text or "").strip()


def children(element: ET.Element) -> list[tuple[str, str]]:
    """(field name, value text) for each direct child of element."""
    return [(child.tag, element_text(child)) for child in element]


def repeated_children(element: ET.Element, tag: str) -> list[ET.Element]:
    """Direct children of element named ``tag``, in document order."""
    return element.findall(tag)


# --- Value interpreters ---

_INTEGER = re.compile(r"[+-]?[0-9]+")


def to_bool(field: str, text: str) -> bool:
    """Exactly 'True' or 'False'."""
    if text == "True":
        return True
    if text == "False":
        return False
    raise UnsupportedFieldValueError(field, text, "True or False")


def to_int(field: str, text: str) -> int:
    """ASCII digits with an optional sign; no underscores or whitespace."""
    if not _INTEGER.fullmatch(text):
        raise UnsupportedFieldValueError(field, text, "an integer")
    return int(text)


def to_float(field: str, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise UnsupportedFieldValueError(field, text, "a number")


def to_choice(field: str, text: str, choices: dict[str, Any]) -> Any:
    """Case-insensitive lookup of text among ``choices`` (lowercase keys)."""
    key = text.lower()
    if key not in choices:
        raise UnsupportedFieldValueError(field, text, " or ".join(sorted(choices)))
    return choices[key]


def to_text(field: str, text: str) -> str:
    return text


# A field table maps an XML field name to (model attribute, converter).
FieldTable = dict[str, tuple[str, Callable[[str, str], Any]]]


def read_record(
    element: ET.Element,
    table: FieldTable,
    record: str,
    required: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Convert one record element into model keyword arguments.

    Every child must be named in ``table``; every name in ``required`` must
    be present.
    """
    values: dict[str, Any] = {}
    seen: set[str] = set()
    for name, text in children(element):
        if name not in table:
            raise UnknownFieldError(f"unknown field '{name}' in {record}")
        attr, convert = table[name]
        values[attr] = convert(name, text)
        seen.add(name)

    for name in required:
        if name not in seen:
            raise MissingFieldError(f"{record} lacks required field '{name}'")
    return values
