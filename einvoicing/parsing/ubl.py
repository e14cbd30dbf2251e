# File: einvoicing/parsing/ubl.py
# -*- coding: utf-8 -*-
"""
UBL 2.1 invoice reader
======================
• UblReader.import_document()  → Invoice from XML text or bytes
• UblReader.import_file()      → Invoice from a file on disk
• read_invoice()               → convenience wrapper accepting a path,
                                 XML text or bytes

Every lookup is relative to the node being processed and only follows
direct children, e.g. ``cbc:ID`` on the document root is the invoice number
and never the ``cbc:ID`` of a party or a line.  Absent optional nodes leave
the corresponding field unset.
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple

from lxml import etree as LET

from einvoicing.constants import TRACE, WARN_UNKNOWN_PRESET
from einvoicing.core.models import (
    AddressTarget,
    AllowanceChargeTarget,
    AllowanceOrCharge,
    Delivery,
    Identifier,
    Invoice,
    InvoiceLine,
    Party,
    VatTarget,
)
from einvoicing.core.presets import resolve_preset
from einvoicing.errors import (
    MissingRequiredFieldError,
    StructuralParseError,
    UnknownPresetWarning,
)

from .base import AbstractReader, load_document
from .codes import CHARGE_TRUE, UBL_INVOICE_NS, UBL_NS, SchemeAttr
from .utils import _text, parse_date, parse_decimal, parse_int

# module logger
log = logging.getLogger(__name__)

Converter = Optional[Callable[[str, Optional[str]], Any]]


def _t(msg, *args):
    if TRACE:
        log.warning("[TRACE UBL] " + msg, *args)


# ────────────────────────── tree access ──────────────────────────
def _join(ctx: str, path: str) -> str:
    return f"{ctx}/{path}" if ctx else path


def _get(node: LET._Element, path: str) -> LET._Element | None:
    """Return the first element matching ``path`` below ``node``."""
    try:
        return node.find(path, UBL_NS)
    except (SyntaxError, KeyError) as exc:
        raise StructuralParseError(f"Invalid path: {exc}", path) from exc


def _get_all(node: LET._Element, path: str) -> List[LET._Element]:
    """Return every element matching ``path`` below ``node`` in order."""
    try:
        return node.findall(path, UBL_NS)
    except (SyntaxError, KeyError) as exc:
        raise StructuralParseError(f"Invalid path: {exc}", path) from exc


def _apply_fields(
    target: Any,
    node: LET._Element,
    fields: Iterable[Tuple[str, str, Converter]],
    ctx: str = "",
) -> None:
    """Set ``target.<attr>`` for every ``(attr, path, convert)`` whose node
    exists.  Fields are processed in the given order."""
    for attr, path, convert in fields:
        el = _get(node, path)
        if el is None:
            continue
        value: Any = _text(el)
        if convert is not None:
            value = convert(value, _join(ctx, path))
        setattr(target, attr, value)
        _t("%s = %r", _join(ctx, path), value)


# ────────────────────────── field tables ──────────────────────────
HEADER_FIELDS: Tuple[Tuple[str, str, Converter], ...] = (
    ("business_process", "cbc:ProfileID", None),  # BT-23
    ("number", "cbc:ID", None),  # BT-1
    ("issue_date", "cbc:IssueDate", parse_date),  # BT-2
    ("due_date", "cbc:DueDate", parse_date),  # BT-9
    ("type", "cbc:InvoiceTypeCode", parse_int),  # BT-3
    ("note", "cbc:Note", None),  # BT-22
    ("tax_point_date", "cbc:TaxPointDate", parse_date),  # BT-7
    ("currency", "cbc:DocumentCurrencyCode", None),  # BT-5
    ("buyer_accounting_reference", "cbc:AccountingCost", None),  # BT-19
    ("buyer_reference", "cbc:BuyerReference", None),  # BT-10
)

ADDRESS_FIELDS: Tuple[Tuple[str, str, Converter], ...] = (
    ("city", "cbc:CityName", None),
    ("postal_code", "cbc:PostalZone", None),
    ("subdivision", "cbc:CountrySubentity", None),
    ("country", "cac:Country/cbc:IdentificationCode", None),
)

ADDRESS_LINE_PATHS = (
    "cbc:StreetName",
    "cbc:AdditionalStreetName",
    "cac:AddressLine/cbc:Line",
)

VAT_FIELDS: Tuple[Tuple[str, str, Converter], ...] = (
    ("vat_category", "cbc:ID", None),
    ("vat_rate", "cbc:Percent", parse_decimal),
)


# ────────────────────── shared field mappers ──────────────────────
def _parse_identifier(
    node: LET._Element, scheme_attr: str = SchemeAttr.DEFAULT.value
) -> Identifier:
    """Build an :class:`Identifier` from ``node`` and its scheme attribute."""
    return Identifier(_text(node), node.get(scheme_attr))


def _parse_postal_address(
    node: LET._Element, target: AddressTarget, ctx: str = ""
) -> None:
    """Copy postal address fields from ``node`` onto ``target``.

    Address lines come from ``StreetName``, ``AdditionalStreetName`` and
    ``AddressLine/Line`` in that order; missing ones are skipped, so the
    list may be empty but never contains placeholders.
    """
    lines = []
    for path in ADDRESS_LINE_PATHS:
        el = _get(node, path)
        if el is not None:
            lines.append(_text(el))
    target.address = lines
    _t("%s = %r", _join(ctx, "address"), lines)
    _apply_fields(target, node, ADDRESS_FIELDS, ctx)


def _set_vat_attributes(
    target: VatTarget, node: LET._Element, ctx: str = ""
) -> None:
    _apply_fields(target, node, VAT_FIELDS, ctx)


# ────────────────────────── parties ──────────────────────────
def _parse_seller_or_buyer(node: LET._Element, ctx: str = "") -> Party:
    party = Party()

    # BT-34 / BT-49: Electronic address
    el = _get(node, "cbc:EndpointID")
    if el is not None:
        party.electronic_address = _parse_identifier(el)

    # BT-29 / BT-46: Additional identifiers
    for el in _get_all(node, "cac:PartyIdentification/cbc:ID"):
        party.add_identifier(_parse_identifier(el))

    # BT-28 / BT-45: Trading name
    _apply_fields(
        party, node, (("trading_name", "cac:PartyName/cbc:Name", None),), ctx
    )

    # BG-5 / BG-8: Postal address
    el = _get(node, "cac:PostalAddress")
    if el is not None:
        _parse_postal_address(el, party, _join(ctx, "cac:PostalAddress"))

    _apply_fields(
        party,
        node,
        (
            ("vat_number", "cac:PartyTaxScheme/cbc:CompanyID", None),
            ("name", "cac:PartyLegalEntity/cbc:RegistrationName", None),
        ),
        ctx,
    )

    # BT-30 / BT-47: Legal registration identifier
    el = _get(node, "cac:PartyLegalEntity/cbc:CompanyID")
    if el is not None:
        party.company_id = _parse_identifier(el)

    # BG-6 / BG-9: Contact
    _apply_fields(
        party,
        node,
        (
            ("contact_name", "cac:Contact/cbc:Name", None),
            ("contact_phone", "cac:Contact/cbc:Telephone", None),
            ("contact_email", "cac:Contact/cbc:ElectronicMail", None),
        ),
        ctx,
    )
    return party


def _parse_payee(node: LET._Element, ctx: str = "") -> Party:
    """Payee (BG-10) only defines identifiers, a name and a legal ID."""
    party = Party()

    # BT-60: Payee identifiers
    for el in _get_all(node, "cac:PartyIdentification/cbc:ID"):
        party.add_identifier(_parse_identifier(el))

    # BT-59: Payee name
    _apply_fields(party, node, (("name", "cac:PartyName/cbc:Name", None),), ctx)

    # BT-61: Payee legal registration identifier
    el = _get(node, "cac:PartyLegalEntity/cbc:CompanyID")
    if el is not None:
        party.company_id = _parse_identifier(el)
    return party


# ────────────────────────── delivery ──────────────────────────
def _parse_delivery(node: LET._Element, ctx: str = "") -> Delivery:
    delivery = Delivery()

    # BT-72: Actual delivery date
    _apply_fields(
        delivery, node, (("date", "cbc:ActualDeliveryDate", parse_date),), ctx
    )

    # BT-71: Delivery location identifier
    el = _get(node, "cac:DeliveryLocation/cbc:ID")
    if el is not None:
        delivery.location_identifier = _parse_identifier(el)

    # BG-15: Deliver to address
    path = "cac:DeliveryLocation/cac:Address"
    el = _get(node, path)
    if el is not None:
        _parse_postal_address(el, delivery, _join(ctx, path))

    # BT-70: Deliver to party name
    _apply_fields(
        delivery,
        node,
        (("name", "cac:DeliveryParty/cac:PartyName/cbc:Name", None),),
        ctx,
    )
    return delivery


# ──────────────────── allowances and charges ────────────────────
def _add_allowance_or_charge(
    target: AllowanceChargeTarget, node: LET._Element, ctx: str = ""
) -> AllowanceOrCharge:
    """Read one ``cac:AllowanceCharge`` and append it to ``target``.

    ``cbc:ChargeIndicator`` is required.  When
    ``cbc:MultiplierFactorNumeric`` is present the item is a percentage,
    otherwise ``cbc:Amount`` is required and used as absolute amount.
    """
    indicator = _get(node, "cbc:ChargeIndicator")
    if indicator is None:
        raise MissingRequiredFieldError(
            "Missing charge indicator", _join(ctx, "cbc:ChargeIndicator")
        )
    item = AllowanceOrCharge(is_charge=_text(indicator) == CHARGE_TRUE)
    if item.is_charge:
        target.add_charge(item)
    else:
        target.add_allowance(item)

    # BT-98 / BT-105 / BT-140 / BT-145: Reason code
    # BT-97 / BT-104 / BT-139 / BT-144: Reason
    _apply_fields(
        item,
        node,
        (
            ("reason_code", "cbc:AllowanceChargeReasonCode", None),
            ("reason", "cbc:AllowanceChargeReason", None),
        ),
        ctx,
    )

    factor = _get(node, "cbc:MultiplierFactorNumeric")
    if factor is not None:
        path = _join(ctx, "cbc:MultiplierFactorNumeric")
        item.mark_as_percentage().amount = parse_decimal(_text(factor), path)
    else:
        path = _join(ctx, "cbc:Amount")
        amount = _get(node, "cbc:Amount")
        if amount is None:
            raise MissingRequiredFieldError(
                "Missing amount (no multiplier factor given)", path
            )
        item.amount = parse_decimal(_text(amount), path)
    _t("%s = %r (percentage=%s)", path, item.amount, item.is_percentage)

    el = _get(node, "cac:TaxCategory")
    if el is not None:
        _set_vat_attributes(item, el, _join(ctx, "cac:TaxCategory"))
    return item


# ────────────────────────── invoice lines ──────────────────────────
LINE_ITEM_FIELDS: Tuple[Tuple[str, str, Converter], ...] = (
    ("description", "cac:Item/cbc:Description", None),  # BT-154
    ("name", "cac:Item/cbc:Name", None),  # BT-153
    (
        "buyer_identifier",
        "cac:Item/cac:BuyersItemIdentification/cbc:ID",
        None,
    ),  # BT-156
    (
        "seller_identifier",
        "cac:Item/cac:SellersItemIdentification/cbc:ID",
        None,
    ),  # BT-155
)


def _parse_invoice_line(node: LET._Element, ctx: str = "") -> InvoiceLine:
    line = InvoiceLine()

    # BT-129 / BT-130: Quantity and unit
    qty = _get(node, "cbc:InvoicedQuantity")
    if qty is not None:
        line.quantity = parse_decimal(
            _text(qty), _join(ctx, "cbc:InvoicedQuantity")
        )
        line.unit = qty.get("unitCode")
        _t(
            "%s = %r %s",
            _join(ctx, "cbc:InvoicedQuantity"),
            line.quantity,
            line.unit,
        )

    _apply_fields(
        line,
        node,
        (
            ("buyer_accounting_reference", "cbc:AccountingCost", None),  # BT-133
            (
                "order_line_reference",
                "cac:OrderLineReference/cbc:LineID",
                None,
            ),  # BT-132
        ),
        ctx,
    )

    # BG-27 / BG-28: Line allowances and charges
    for idx, el in enumerate(_get_all(node, "cac:AllowanceCharge"), 1):
        _add_allowance_or_charge(
            line, el, _join(ctx, f"cac:AllowanceCharge[{idx}]")
        )

    _apply_fields(line, node, LINE_ITEM_FIELDS, ctx)

    # BT-157: Standard identifier
    el = _get(node, "cac:Item/cac:StandardItemIdentification/cbc:ID")
    if el is not None:
        line.standard_identifier = _parse_identifier(el)

    # BT-159: Item country of origin
    _apply_fields(
        line,
        node,
        (
            (
                "origin_country",
                "cac:Item/cac:OriginCountry/cbc:IdentificationCode",
                None,
            ),
        ),
        ctx,
    )

    # BT-158: Item classification identifiers
    for el in _get_all(
        node, "cac:Item/cac:CommodityClassification/cbc:ItemClassificationCode"
    ):
        line.add_classification_identifier(
            _parse_identifier(el, SchemeAttr.CLASSIFICATION.value)
        )

    # BT-146 / BT-149: Net price and base quantity
    _apply_fields(
        line,
        node,
        (
            ("price", "cac:Price/cbc:PriceAmount", parse_decimal),
            ("base_quantity", "cac:Price/cbc:BaseQuantity", parse_decimal),
        ),
        ctx,
    )

    # BT-151 / BT-152: Item VAT category and rate
    path = "cac:Item/cac:ClassifiedTaxCategory"
    el = _get(node, path)
    if el is not None:
        _set_vat_attributes(line, el, _join(ctx, path))
    return line


# ────────────────────────── reader ──────────────────────────
class UblReader(AbstractReader):
    """Read UBL 2.1 ``Invoice`` documents."""

    @property
    def name(self) -> str:
        return "ubl"

    def can_read(self, root: LET._Element) -> bool:
        return root.tag == f"{{{UBL_INVOICE_NS}}}Invoice"

    def import_document(self, document: str | bytes) -> Invoice:
        root = load_document(document)
        return self.import_root(root)

    def import_root(self, root: LET._Element) -> Invoice:
        """Build an :class:`Invoice` from an already parsed document root."""
        invoice = Invoice()

        # BT-24: Specification identifier.  Must be read before any other
        # field because a matching preset replaces the invoice instance.
        el = _get(root, "cbc:CustomizationID")
        if el is not None:
            specification = _text(el)
            invoice.specification = specification
            preset = resolve_preset(specification)
            if preset is not None:
                invoice = Invoice.for_preset(preset)
                invoice.specification = specification
            else:
                log.warning("Unknown specification identifier: %s", specification)
                if WARN_UNKNOWN_PRESET:
                    warnings.warn(
                        f"No preset for specification {specification!r}",
                        UnknownPresetWarning,
                    )

        _apply_fields(invoice, root, HEADER_FIELDS)

        # BG-4: Seller
        path = "cac:AccountingSupplierParty/cac:Party"
        el = _get(root, path)
        if el is not None:
            invoice.seller = _parse_seller_or_buyer(el, path)

        # BG-7: Buyer
        path = "cac:AccountingCustomerParty/cac:Party"
        el = _get(root, path)
        if el is not None:
            invoice.buyer = _parse_seller_or_buyer(el, path)

        # BG-10: Payee
        el = _get(root, "cac:PayeeParty")
        if el is not None:
            invoice.payee = _parse_payee(el, "cac:PayeeParty")

        # BG-13: Delivery information
        el = _get(root, "cac:Delivery")
        if el is not None:
            invoice.delivery = _parse_delivery(el, "cac:Delivery")

        # BG-20 / BG-21: Document level allowances and charges
        for idx, el in enumerate(_get_all(root, "cac:AllowanceCharge"), 1):
            _add_allowance_or_charge(invoice, el, f"cac:AllowanceCharge[{idx}]")

        # BG-25: Invoice lines
        for idx, el in enumerate(_get_all(root, "cac:InvoiceLine"), 1):
            invoice.add_line(_parse_invoice_line(el, f"cac:InvoiceLine[{idx}]"))

        log.debug(
            "Parsed UBL invoice %s: %d lines, %d allowances, %d charges",
            invoice.number,
            len(invoice.lines),
            len(invoice.allowances),
            len(invoice.charges),
        )
        return invoice


def _is_file(source: str) -> bool:
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        return False


def read_invoice(source: str | bytes | Path) -> Invoice:
    """
    Parse a UBL invoice from a file path, XML text or raw bytes.

    A string is read as a file path only when it names an existing file;
    any other string is parsed as XML text.
    """
    reader = UblReader()
    if isinstance(source, Path):
        return reader.import_file(source)
    if isinstance(source, str):
        source = source.lstrip("\ufeff")
        if not source.lstrip().startswith("<") and _is_file(source):
            return reader.import_file(source)
    return reader.import_document(source)
