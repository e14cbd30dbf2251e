"""Errors raised while importing e-invoice documents.

Every fatal error derives from :class:`EInvoiceError` (itself a
``ValueError``) and carries the qualified path of the node that triggered
it, when one is known.  Unknown presets are not fatal and are reported with
:class:`UnknownPresetWarning` through :mod:`warnings`.
"""

from __future__ import annotations


class EInvoiceError(ValueError):
    """Base class for import failures."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} [{path}]" if path else message)


class StructuralParseError(EInvoiceError):
    """The document is not a well-formed tree or a lookup path is invalid."""


class MissingRequiredFieldError(EInvoiceError):
    """A node required inside an already entered subtree is absent."""


class TypeConversionError(EInvoiceError):
    """Text content could not be converted to a date, integer or decimal."""

    def __init__(
        self, message: str, path: str | None = None, value: str | None = None
    ) -> None:
        self.value = value
        super().__init__(message, path)


class UnknownPresetWarning(UserWarning):
    """``CustomizationID`` does not match any registered preset."""
