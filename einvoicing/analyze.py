from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from einvoicing.core.models import AllowanceOrCharge, Invoice
from einvoicing.parsing.codes import InvoiceType


LINE_COLUMNS = [
    "name",
    "quantity",
    "unit",
    "price",
    "base_quantity",
    "vat_category",
    "vat_rate",
    "allowances",
    "charges",
]

ALLOWANCE_COLUMNS = [
    "level",
    "line",
    "kind",
    "reason_code",
    "reason",
    "amount",
    "is_percentage",
    "vat_category",
    "vat_rate",
]


def lines_dataframe(invoice: Invoice) -> pd.DataFrame:
    """Return one row per invoice line in document order.

    Numeric columns hold :class:`~decimal.Decimal` values (object dtype);
    fields that were absent in the document are ``None``.
    """
    rows = [
        {
            "name": line.name,
            "quantity": line.quantity,
            "unit": line.unit,
            "price": line.price,
            "base_quantity": line.base_quantity,
            "vat_category": line.vat_category,
            "vat_rate": line.vat_rate,
            "allowances": len(line.allowances),
            "charges": len(line.charges),
        }
        for line in invoice.lines
    ]
    if not rows:
        return pd.DataFrame(columns=LINE_COLUMNS)
    return pd.DataFrame(rows, columns=LINE_COLUMNS, dtype=object)


def _allowance_row(
    item: AllowanceOrCharge, level: str, line: int | None
) -> Dict[str, Any]:
    return {
        "level": level,
        "line": line,
        "kind": "charge" if item.is_charge else "allowance",
        "reason_code": item.reason_code,
        "reason": item.reason,
        "amount": item.amount,
        "is_percentage": item.is_percentage,
        "vat_category": item.vat_category,
        "vat_rate": item.vat_rate,
    }


def allowances_dataframe(invoice: Invoice) -> pd.DataFrame:
    """Return document and line level allowances/charges.

    Document level rows come first (allowances, then charges), followed by
    the rows of each line in line order.  ``line`` is the 1-based line
    position or ``None`` for document level rows.
    """
    rows: List[Dict[str, Any]] = []
    for item in invoice.allowances + invoice.charges:
        rows.append(_allowance_row(item, "document", None))
    for pos, line in enumerate(invoice.lines, 1):
        for item in line.allowances + line.charges:
            rows.append(_allowance_row(item, "line", pos))
    if not rows:
        return pd.DataFrame(columns=ALLOWANCE_COLUMNS)
    return pd.DataFrame(rows, columns=ALLOWANCE_COLUMNS, dtype=object)


def summarize_invoice(invoice: Invoice) -> Dict[str, Any]:
    """Return a flat header summary used by the CLI."""
    try:
        type_name = (
            InvoiceType(invoice.type).name if invoice.type is not None else None
        )
    except ValueError:
        type_name = str(invoice.type)
    return {
        "number": invoice.number,
        "issue_date": invoice.issue_date,
        "due_date": invoice.due_date,
        "type": type_name,
        "currency": invoice.currency,
        "preset": invoice.preset.name if invoice.preset else None,
        "specification": invoice.specification,
        "seller": (
            invoice.seller.name or invoice.seller.trading_name
            if invoice.seller
            else None
        ),
        "buyer": (
            invoice.buyer.name or invoice.buyer.trading_name
            if invoice.buyer
            else None
        ),
        "lines": len(invoice.lines),
        "allowances": len(invoice.allowances),
        "charges": len(invoice.charges),
    }
