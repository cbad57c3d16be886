import pytest

from crm_export.schemas.reports import NO_PURCHASE_CONTEXT, UNUSABLE_PRICE, InventoryRow, SalesRow
from crm_export.services.csv_export import (
    INVENTORY_HEADERS,
    SALES_HEADERS,
    encode_inventory_csv,
    encode_sales_csv,
    escape_field,
    format_price,
    format_quantity,
)


def inventory_row(**overrides):
    values = dict(
        warehouse="Centrale",
        code="ABC1",
        category="Non specificato",
        brand="Pronovias",
        type="Sposa",
        model="Aurora",
        color="Avorio",
        size="42",
        quantity=3,
        supplier="Non specificato",
        purchase_price=12.5,
        tag_price=0,
        suggested_price=0,
        affiliate_price=0,
    )
    values.update(overrides)
    return InventoryRow(**values)


def sales_row(**overrides):
    values = dict(
        appointment_date="10/05/2024",
        atelier="Atelier Milano",
        employee="Giulia Bianchi",
        client="Anna Rossi",
        wedding_date="21/06/2025",
        category="Abito",
        model="Aurora",
        brand="Pronovias",
        type="Sposa",
        size="42",
        quantity=1,
        sale_type="Noleggiato",
        color="Avorio",
        code="ABC1",
        sale_price=175,
        supplier="Sposa Group",
        purchase_price=80,
        tag_price=UNUSABLE_PRICE,
        suggested_price=NO_PURCHASE_CONTEXT,
        affiliate_price=0,
    )
    values.update(overrides)
    return SalesRow(**values)


def data_lines(blob):
    assert blob.startswith("\ufeff")
    assert blob.endswith("\n")
    return blob[1:].split("\n")[:-1]


@pytest.mark.parametrize(
    "value, expected",
    [
        (1234.5, "1234,50"),
        (0, "0,00"),
        (None, "0,00"),
        (12, "12,00"),
        (-1, "-1,00"),
        (0.125, "0,13"),
        (1.005, "1,00"),
        (-10, "-10,00"),
        (-0.0, "0,00"),
    ],
)
def test_format_price_uses_two_decimals_and_comma(value, expected):
    assert format_price(value) == expected


def test_format_quantity_drops_integral_decimals():
    assert format_quantity(3.0) == "3"
    assert format_quantity(2.5) == "2.5"
    assert format_quantity(0) == "0"


def test_escape_field_quotes_separator_quotes_and_newlines():
    assert escape_field("A;B") == '"A;B"'
    assert escape_field('He said "hi"') == '"He said ""hi"""'
    assert escape_field("riga\nnuova") == '"riga\nnuova"'
    assert escape_field("semplice") == "semplice"


def test_inventory_csv_layout():
    blob = encode_inventory_csv([inventory_row()])

    header, line = data_lines(blob)
    assert header == ";".join(INVENTORY_HEADERS)
    assert line == (
        "Centrale;ABC1;Non specificato;Pronovias;Sposa;Aurora;Avorio;42;3;"
        "Non specificato;12,50;0,00;0,00;0,00;37,50"
    )


def test_inventory_csv_escapes_text_fields():
    blob = encode_inventory_csv([inventory_row(warehouse="Nord;Est", model='Modello "Luna"', code=None)])

    line = data_lines(blob)[1]
    assert line.startswith('"Nord;Est";;')
    assert ';"Modello ""Luna""";' in line


def test_sales_csv_marks_missing_context_but_not_unusable_prices():
    blob = encode_sales_csv([sales_row()])

    header, line = data_lines(blob)
    assert header == ";".join(SALES_HEADERS)
    fields = line.split(";")
    assert fields[10] == "1"
    assert fields[11] == "Noleggiato"
    assert fields[14] == "175,00"
    assert fields[16:] == ["80,00", "-1,00", "N/D", "0,00"]


def test_sales_csv_renders_missing_values_as_empty():
    blob = encode_sales_csv([sales_row(appointment_date=None, atelier=None, employee=None, code=None)])

    fields = data_lines(blob)[1].split(";")
    assert fields[0] == fields[1] == fields[2] == fields[13] == ""


def test_row_order_is_preserved():
    rows = [inventory_row(code="Z", quantity=1), inventory_row(code="A", quantity=9)]

    lines = data_lines(encode_inventory_csv(rows))

    assert [line.split(";")[1] for line in lines[1:]] == ["Z", "A"]


def test_empty_reports_only_have_headers():
    assert encode_inventory_csv([]) == "\ufeff" + ";".join(INVENTORY_HEADERS) + "\n"
    assert encode_sales_csv([]) == "\ufeff" + ";".join(SALES_HEADERS) + "\n"


def test_encoding_is_deterministic():
    rows = [inventory_row(), inventory_row(code="XYZ", quantity=7, purchase_price=3.333)]

    assert encode_inventory_csv(rows).encode("utf-8") == encode_inventory_csv(rows).encode("utf-8")
