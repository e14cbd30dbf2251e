from decimal import Decimal

import pytest

from einvoicing.core.models import Identifier
from einvoicing.errors import TypeConversionError
from einvoicing.parsing.ubl import read_invoice

HEAD = (
    "<Invoice xmlns='urn:oasis:names:specification:ubl:schema:xsd:Invoice-2' "
    "xmlns:cac='urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2' "
    "xmlns:cbc='urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2'>"
)

FULL_LINE = """
  <cac:InvoiceLine>
    <cbc:ID>1</cbc:ID>
    <cbc:InvoicedQuantity unitCode="KGM">2.500</cbc:InvoicedQuantity>
    <cbc:LineExtensionAmount currencyID="EUR">22.50</cbc:LineExtensionAmount>
    <cbc:AccountingCost>CC-42</cbc:AccountingCost>
    <cac:OrderLineReference><cbc:LineID>7</cbc:LineID></cac:OrderLineReference>
    <cac:AllowanceCharge>
      <cbc:ChargeIndicator>false</cbc:ChargeIndicator>
      <cbc:AllowanceChargeReason>Volume</cbc:AllowanceChargeReason>
      <cbc:Amount currencyID="EUR">2.50</cbc:Amount>
    </cac:AllowanceCharge>
    <cac:AllowanceCharge>
      <cbc:ChargeIndicator>true</cbc:ChargeIndicator>
      <cbc:AllowanceChargeReasonCode>FC</cbc:AllowanceChargeReasonCode>
      <cbc:MultiplierFactorNumeric>3</cbc:MultiplierFactorNumeric>
    </cac:AllowanceCharge>
    <cac:Item>
      <cbc:Description>Fresh apples, class I</cbc:Description>
      <cbc:Name>Apples</cbc:Name>
      <cac:BuyersItemIdentification><cbc:ID>B-APL</cbc:ID></cac:BuyersItemIdentification>
      <cac:SellersItemIdentification><cbc:ID>S-APL</cbc:ID></cac:SellersItemIdentification>
      <cac:StandardItemIdentification><cbc:ID schemeID="0160">3830000000001</cbc:ID></cac:StandardItemIdentification>
      <cac:OriginCountry><cbc:IdentificationCode>IT</cbc:IdentificationCode></cac:OriginCountry>
      <cac:CommodityClassification>
        <cbc:ItemClassificationCode listID="STI">0808</cbc:ItemClassificationCode>
      </cac:CommodityClassification>
      <cac:CommodityClassification>
        <cbc:ItemClassificationCode listID="CG" listVersionID="1">APL</cbc:ItemClassificationCode>
      </cac:CommodityClassification>
      <cac:ClassifiedTaxCategory>
        <cbc:ID>AA</cbc:ID>
        <cbc:Percent>9.5</cbc:Percent>
        <cac:TaxScheme><cbc:ID>VAT</cbc:ID></cac:TaxScheme>
      </cac:ClassifiedTaxCategory>
    </cac:Item>
    <cac:Price>
      <cbc:PriceAmount currencyID="EUR">10.00</cbc:PriceAmount>
      <cbc:BaseQuantity unitCode="KGM">1</cbc:BaseQuantity>
    </cac:Price>
  </cac:InvoiceLine>
"""


def _doc(body: str) -> str:
    return HEAD + body + "</Invoice>"


def _line(*children: str) -> str:
    return "<cac:InvoiceLine>" + "".join(children) + "</cac:InvoiceLine>"


def test_invoice_line_all_fields():
    line = read_invoice(_doc(FULL_LINE)).lines[0]

    assert line.quantity == Decimal("2.500")
    assert line.unit == "KGM"
    assert line.buyer_accounting_reference == "CC-42"
    assert line.order_line_reference == "7"
    assert line.description == "Fresh apples, class I"
    assert line.name == "Apples"
    assert line.buyer_identifier == "B-APL"
    assert line.seller_identifier == "S-APL"
    assert line.standard_identifier == Identifier("3830000000001", "0160")
    assert line.origin_country == "IT"
    assert line.classification_identifiers == [
        Identifier("0808", "STI"),
        Identifier("APL", "CG"),
    ]
    assert line.price == Decimal("10.00")
    assert line.base_quantity == Decimal("1")
    assert line.vat_category == "AA"
    assert line.vat_rate == Decimal("9.5")

    assert len(line.allowances) == 1
    assert line.allowances[0].reason == "Volume"
    assert line.allowances[0].absolute_amount == Decimal("2.50")
    assert len(line.charges) == 1
    assert line.charges[0].reason_code == "FC"
    assert line.charges[0].percentage == Decimal("3")


def test_line_allowances_do_not_reach_invoice():
    invoice = read_invoice(_doc(FULL_LINE))
    assert invoice.allowances == []
    assert invoice.charges == []


def test_lines_keep_document_order():
    body = "".join(
        _line(f"<cac:Item><cbc:Name>Item {n}</cbc:Name></cac:Item>")
        for n in range(1, 6)
    )
    invoice = read_invoice(_doc(body))
    assert [line.name for line in invoice.lines] == [
        f"Item {n}" for n in range(1, 6)
    ]


def test_line_without_quantity_has_no_unit():
    line = read_invoice(
        _doc(_line("<cac:Price><cbc:PriceAmount>1</cbc:PriceAmount></cac:Price>"))
    ).lines[0]
    assert line.quantity is None
    assert line.unit is None
    assert line.price == Decimal("1")


def test_quantity_without_unit_code():
    line = read_invoice(
        _doc(_line("<cbc:InvoicedQuantity>4</cbc:InvoicedQuantity>"))
    ).lines[0]
    assert line.quantity == Decimal("4")
    assert line.unit is None


def test_empty_line_leaves_everything_unset():
    line = read_invoice(_doc(_line())).lines[0]
    assert line.quantity is None
    assert line.description is None
    assert line.standard_identifier is None
    assert line.classification_identifiers == []
    assert line.price is None
    assert line.base_quantity is None
    assert line.vat_category is None
    assert line.vat_rate is None


def test_nested_item_name_is_not_taken_from_sub_item():
    # cac:Item/cbc:Name only; a name below an item property must not match
    line = read_invoice(
        _doc(
            _line(
                "<cac:Item><cac:AdditionalItemProperty><cbc:Name>Colour</cbc:Name>"
                "<cbc:Value>Red</cbc:Value></cac:AdditionalItemProperty></cac:Item>"
            )
        )
    ).lines[0]
    assert line.name is None


def test_invalid_price_reports_line_position():
    body = _line() + _line(
        "<cac:Price><cbc:PriceAmount>ten</cbc:PriceAmount></cac:Price>"
    )
    with pytest.raises(TypeConversionError) as exc_info:
        read_invoice(_doc(body))
    assert exc_info.value.path == "cac:InvoiceLine[2]/cac:Price/cbc:PriceAmount"


def test_line_allowance_error_reports_nested_path():
    body = _line(
        "<cac:AllowanceCharge><cbc:ChargeIndicator>true</cbc:ChargeIndicator>"
        "</cac:AllowanceCharge>"
    )
    with pytest.raises(ValueError) as exc_info:
        read_invoice(_doc(body))
    assert exc_info.value.path == (
        "cac:InvoiceLine[1]/cac:AllowanceCharge[1]/cbc:Amount"
    )
