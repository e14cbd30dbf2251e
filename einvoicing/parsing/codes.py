"""Namespaces and enumerations used while reading UBL documents."""

from enum import Enum, IntEnum

# Namespaces for UBL documents
UBL_NS = {
    "cac": (
        "urn:oasis:names:specification:ubl:"
        "schema:xsd:CommonAggregateComponents-2"
    ),
    "cbc": (
        "urn:oasis:names:specification:ubl:"
        "schema:xsd:CommonBasicComponents-2"
    ),
}

UBL_INVOICE_NS = "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2"


class SchemeAttr(str, Enum):
    """Attributes holding the scheme of an identifier."""

    DEFAULT = "schemeID"
    CLASSIFICATION = "listID"


class InvoiceType(IntEnum):
    """Common UNTDID 1001 invoice type codes (BT-3)."""

    COMMERCIAL = 380
    CREDIT_NOTE = 381
    DEBIT_NOTE = 383
    CORRECTED = 384
    PREPAYMENT = 386
    SELF_BILLED = 389


# ``cbc:ChargeIndicator`` value that marks a charge; anything else is an
# allowance.
CHARGE_TRUE = "true"
