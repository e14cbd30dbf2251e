from datetime import date
from decimal import Decimal

from einvoicing.analyze import (
    ALLOWANCE_COLUMNS,
    LINE_COLUMNS,
    allowances_dataframe,
    lines_dataframe,
    summarize_invoice,
)
from einvoicing.core.models import AllowanceOrCharge, Invoice, InvoiceLine, Party
from einvoicing.core.presets import PresetVariant, get_preset


def _invoice() -> Invoice:
    inv = Invoice(number="A-1", issue_date=date(2023, 5, 1), currency="EUR", type=380)
    inv.seller = Party(trading_name="Shop", name="Shop d.o.o.")
    inv.add_allowance(AllowanceOrCharge(amount=Decimal("5.00")))
    line1 = InvoiceLine(
        name="Apples",
        quantity=Decimal("3"),
        unit="KGM",
        price=Decimal("1.20"),
        vat_category="S",
        vat_rate=Decimal("9.5"),
    )
    line1.add_charge(
        AllowanceOrCharge(is_charge=True, amount=Decimal("2")).mark_as_percentage()
    )
    line2 = InvoiceLine(name="Pears")
    inv.add_line(line1)
    inv.add_line(line2)
    return inv


def test_lines_dataframe():
    df = lines_dataframe(_invoice())

    assert list(df.columns) == LINE_COLUMNS
    assert df["name"].tolist() == ["Apples", "Pears"]
    assert df["quantity"].iloc[0] == Decimal("3")
    assert isinstance(df["price"].iloc[0], Decimal)
    assert df["price"].iloc[1] is None
    assert df["charges"].tolist() == [1, 0]
    assert df["allowances"].tolist() == [0, 0]


def test_lines_dataframe_empty_invoice():
    df = lines_dataframe(Invoice())
    assert df.empty
    assert list(df.columns) == LINE_COLUMNS


def test_allowances_dataframe_levels():
    df = allowances_dataframe(_invoice())

    assert list(df.columns) == ALLOWANCE_COLUMNS
    assert df["level"].tolist() == ["document", "line"]
    assert df["kind"].tolist() == ["allowance", "charge"]
    assert df["line"].iloc[0] is None
    assert df["line"].iloc[1] == 1
    assert df["amount"].tolist() == [Decimal("5.00"), Decimal("2")]
    assert df["is_percentage"].tolist() == [False, True]


def test_allowances_dataframe_empty():
    df = allowances_dataframe(Invoice())
    assert df.empty
    assert list(df.columns) == ALLOWANCE_COLUMNS


def test_summarize_invoice():
    inv = _invoice()
    inv.preset = get_preset(PresetVariant.PEPPOL)
    summary = summarize_invoice(inv)

    assert summary["number"] == "A-1"
    assert summary["type"] == "COMMERCIAL"
    assert summary["preset"] == "Peppol BIS Billing 3.0"
    assert summary["seller"] == "Shop d.o.o."
    assert summary["buyer"] is None
    assert summary["lines"] == 2
    assert summary["allowances"] == 1
    assert summary["charges"] == 0


def test_summarize_invoice_unknown_type_code():
    summary = summarize_invoice(Invoice(type=875))
    assert summary["type"] == "875"
    assert summarize_invoice(Invoice())["type"] is None
