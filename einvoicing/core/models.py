"""Invoice aggregate produced by the readers.

The classes are plain mutable dataclasses.  A reader creates one
:class:`Invoice` per document, fills it in a single pass and only hands it
out once every field has been extracted.  Optional fields stay ``None``
when their source node is absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol

from .presets import Preset


@dataclass(frozen=True)
class Identifier:
    """Value optionally qualified by the identification scheme it belongs to."""

    value: str
    scheme: Optional[str] = None


class AddressTarget(Protocol):
    """Anything that receives postal address fields."""

    address: Optional[List[str]]
    city: Optional[str]
    postal_code: Optional[str]
    subdivision: Optional[str]
    country: Optional[str]


class VatTarget(Protocol):
    """Anything that receives a VAT category and rate."""

    vat_category: Optional[str]
    vat_rate: Optional[Decimal]


class AllowanceChargeTarget(Protocol):
    """Owner of document or line level allowances and charges."""

    def add_allowance(self, item: "AllowanceOrCharge") -> None: ...

    def add_charge(self, item: "AllowanceOrCharge") -> None: ...


@dataclass
class Party:
    electronic_address: Optional[Identifier] = None
    identifiers: List[Identifier] = field(default_factory=list)
    trading_name: Optional[str] = None
    name: Optional[str] = None
    address: Optional[List[str]] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    subdivision: Optional[str] = None
    country: Optional[str] = None
    vat_number: Optional[str] = None
    company_id: Optional[Identifier] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    def add_identifier(self, identifier: Identifier) -> None:
        self.identifiers.append(identifier)


@dataclass
class Delivery:
    date: Optional[date] = None
    location_identifier: Optional[Identifier] = None
    address: Optional[List[str]] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    subdivision: Optional[str] = None
    country: Optional[str] = None
    name: Optional[str] = None


@dataclass
class AllowanceOrCharge:
    """Deduction (allowance) or addition (charge) to an amount.

    ``amount`` is either an absolute monetary amount or, once
    :meth:`mark_as_percentage` was called, a percentage factor.
    """

    is_charge: bool = False
    reason_code: Optional[str] = None
    reason: Optional[str] = None
    amount: Optional[Decimal] = None
    is_percentage: bool = False
    vat_category: Optional[str] = None
    vat_rate: Optional[Decimal] = None

    def mark_as_percentage(self) -> "AllowanceOrCharge":
        self.is_percentage = True
        return self

    @property
    def absolute_amount(self) -> Optional[Decimal]:
        return None if self.is_percentage else self.amount

    @property
    def percentage(self) -> Optional[Decimal]:
        return self.amount if self.is_percentage else None


@dataclass
class InvoiceLine:
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    buyer_accounting_reference: Optional[str] = None
    order_line_reference: Optional[str] = None
    allowances: List[AllowanceOrCharge] = field(default_factory=list)
    charges: List[AllowanceOrCharge] = field(default_factory=list)
    description: Optional[str] = None
    name: Optional[str] = None
    buyer_identifier: Optional[str] = None
    seller_identifier: Optional[str] = None
    standard_identifier: Optional[Identifier] = None
    origin_country: Optional[str] = None
    classification_identifiers: List[Identifier] = field(default_factory=list)
    price: Optional[Decimal] = None
    base_quantity: Optional[Decimal] = None
    vat_category: Optional[str] = None
    vat_rate: Optional[Decimal] = None

    def add_allowance(self, item: AllowanceOrCharge) -> None:
        self.allowances.append(item)

    def add_charge(self, item: AllowanceOrCharge) -> None:
        self.charges.append(item)

    def add_classification_identifier(self, identifier: Identifier) -> None:
        self.classification_identifiers.append(identifier)


@dataclass
class Invoice:
    preset: Optional[Preset] = None
    specification: Optional[str] = None
    business_process: Optional[str] = None
    number: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    type: Optional[int] = None
    note: Optional[str] = None
    tax_point_date: Optional[date] = None
    currency: Optional[str] = None
    buyer_accounting_reference: Optional[str] = None
    buyer_reference: Optional[str] = None
    seller: Optional[Party] = None
    buyer: Optional[Party] = None
    payee: Optional[Party] = None
    delivery: Optional[Delivery] = None
    allowances: List[AllowanceOrCharge] = field(default_factory=list)
    charges: List[AllowanceOrCharge] = field(default_factory=list)
    lines: List[InvoiceLine] = field(default_factory=list)

    @classmethod
    def for_preset(cls, preset: Preset) -> "Invoice":
        """Return an empty invoice bound to ``preset``."""
        return cls(preset=preset, specification=preset.specification)

    def add_allowance(self, item: AllowanceOrCharge) -> None:
        self.allowances.append(item)

    def add_charge(self, item: AllowanceOrCharge) -> None:
        self.charges.append(item)

    def add_line(self, line: InvoiceLine) -> None:
        self.lines.append(line)
