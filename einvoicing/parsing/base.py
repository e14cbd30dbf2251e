"""
Base reader interface and document loading.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path
from xml.etree.ElementTree import ParseError

from defusedxml import ElementTree as DET
from defusedxml.common import DefusedXmlException
from lxml import etree as LET

from einvoicing.core.models import Invoice
from einvoicing.errors import StructuralParseError

XML_PARSER = LET.XMLParser(
    resolve_entities=False, no_network=True, remove_comments=True
)

_XML_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


def load_document(document: str | bytes) -> LET._Element:
    """Return the root element of ``document``.

    The document is first screened with :mod:`defusedxml` so that entity
    declarations and external references are rejected, then parsed with an
    ``lxml`` parser that never resolves entities.
    """
    if isinstance(document, str):
        # lxml refuses unicode input that still declares an encoding
        document = _XML_DECL_RE.sub("", document.lstrip("\ufeff"), count=1)
    # security screen only; the tree it builds is discarded
    try:
        DET.fromstring(document)
    except DefusedXmlException as exc:
        raise StructuralParseError(f"Forbidden XML construct: {exc}") from exc
    except ParseError as exc:
        raise StructuralParseError(f"Malformed XML: {exc}") from exc
    try:
        return LET.fromstring(document, parser=XML_PARSER)
    except LET.XMLSyntaxError as exc:
        raise StructuralParseError(f"Malformed XML: {exc}") from exc


class AbstractReader(ABC):
    """
    Base class for all document readers.

    Each reader turns one document format into an :class:`Invoice`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Reader name for logging and provenance."""

    @abstractmethod
    def can_read(self, root: LET._Element) -> bool:
        """Return ``True`` if ``root`` belongs to this reader's format."""

    @abstractmethod
    def import_document(self, document: str | bytes) -> Invoice:
        """Parse ``document`` into an :class:`Invoice`.

        Raises :class:`~einvoicing.errors.EInvoiceError` subclasses on
        failure; no partially built invoice is ever returned.
        """

    def import_file(self, path: str | Path) -> Invoice:
        return self.import_document(Path(path).read_bytes())
