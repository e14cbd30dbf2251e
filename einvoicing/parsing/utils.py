# File: einvoicing/parsing/utils.py
"""Utility helpers for parsers."""
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal

from lxml import etree as LET

from einvoicing.errors import TypeConversionError

_ISO_DATE_RE = re.compile(
    r"(?:(\d{4})-(\d{2})-(\d{2})|(\d{4})(\d{2})(\d{2}))"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?$"
)
_DOTTED_DATE_RE = re.compile(r"(\d{1,2})\.\s*(\d{1,2})\.\s*(\d{4})$")
# xsd:decimal / xsd:integer lexical forms
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)$", re.ASCII)
_INT_RE = re.compile(r"[+-]?\d+$", re.ASCII)


def _text(el: LET._Element | None) -> str:
    """Return the whole text content of ``el`` without surrounding blanks."""
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def parse_date(value: str, path: str | None = None) -> date:
    """Convert ``YYYY-MM-DD`` (optionally with time or zone), ``YYYYMMDD``
    or ``DD.MM.YYYY`` into a :class:`datetime.date`.

    Raises :class:`TypeConversionError` when ``value`` is not a valid
    calendar date.
    """
    s = value.replace("\xa0", "").strip()
    m = _ISO_DATE_RE.match(s)
    if m:
        groups = m.groups()
        y, mth, d = groups[:3] if groups[0] is not None else groups[3:]
    else:
        m = _DOTTED_DATE_RE.match(s)
        if not m:
            raise TypeConversionError(
                f"Invalid date {value!r}", path, value
            )
        d, mth, y = m.groups()
    try:
        return date(int(y), int(mth), int(d))
    except ValueError as exc:
        raise TypeConversionError(
            f"Invalid date {value!r}: {exc}", path, value
        ) from exc


def parse_int(value: str, path: str | None = None) -> int:
    txt = value.strip()
    if not _INT_RE.match(txt):
        raise TypeConversionError(f"Invalid integer {value!r}", path, value)
    return int(txt)


def parse_decimal(value: str, path: str | None = None) -> Decimal:
    """Return ``value`` as a :class:`Decimal`.

    Only surrounding blanks are dropped; the text must be a plain
    ``xsd:decimal`` (dot separator, no exponent, no grouping).
    """
    txt = value.strip()
    if not _DECIMAL_RE.match(txt):
        raise TypeConversionError(f"Invalid decimal {value!r}", path, value)
    return Decimal(txt)
