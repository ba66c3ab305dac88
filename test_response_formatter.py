from __future__ import annotations

import time

import pytest

from registry.defaults import default_intents
from shared.models import (
    ActionResult,
    ClientDebtResult,
    Debtor,
    DebtorsResult,
    GenericResult,
    PendingInvoice,
    Product,
    ProductsResult,
    Sale,
    SalesResult,
    SalesTodayResult,
)
from shared.response_formatter import NO_RESULTS, format_results, generate_response, render_template

TEMPLATES = {intent.action: intent.response_template for intent in default_intents()}


def test_error_takes_precedence_over_data():
    result = ActionResult(data=DebtorsResult(items=[]), error="Error obteniendo deudores")
    assert generate_response(TEMPLATES["get_debtors"], result, "deudores") == "❌ Error obteniendo deudores"


def test_missing_data_returns_template_verbatim():
    template = "Hola {{name}}, sin datos."
    assert generate_response(template, ActionResult(), "hola") == template


def test_empty_list_uses_sentinel_and_zero_count():
    text = generate_response(TEMPLATES["get_debtors"], ActionResult(data=DebtorsResult(items=[])), "deudores")
    assert text == "💰 **Clientes con deudas pendientes (0):**\n\nNo se encontraron resultados."
    assert "{{count}}" not in text
    assert NO_RESULTS in text


def test_debtor_blocks():
    result = DebtorsResult(
        items=[
            Debtor(client_id="c2", client_name="María", total_debt=100, pending_invoices=1),
            Debtor(client_id="c1", client_name="Juan", total_debt=75.5, pending_invoices=2),
        ]
    )
    text = generate_response(TEMPLATES["get_debtors"], ActionResult(data=result), "deudores")
    assert text == (
        "💰 **Clientes con deudas pendientes (2):**\n\n"
        "1. **María** (ID: c2)\n"
        "   💰 Deuda: S/ 100.00\n"
        "   📄 Facturas pendientes: 1\n\n"
        "2. **Juan** (ID: c1)\n"
        "   💰 Deuda: S/ 75.50\n"
        "   📄 Facturas pendientes: 2"
    )


def test_product_block():
    result = ProductsResult(items=[Product(id="p1", name="Galletas", price=2.5, stock=10, category="Snacks")])
    assert format_results(result) == (
        "1. **Galletas**\n"
        "   💰 Precio: S/ 2.50\n"
        "   📦 Stock: 10\n"
        "   🏷️ Categoría: Snacks"
    )


def test_sale_block_defaults():
    result = SalesResult(
        items=[
            Sale(id="s1", correlative="B-001", total=30, date="2024-05-10T10:00:00"),
            Sale(id="s2"),
            Sale(id="s3", total=5, date="2024-05-09T23:00:00"),
        ]
    )
    assert format_results(result) == (
        "1. **B-001**\n"
        "   💰 Total: S/ 30.00\n"
        "   📅 Fecha: 10/5/2024\n\n"
        "2. **s2**\n"
        "   💰 Total: S/ 0.00\n"
        "   📅 Fecha: N/A\n\n"
        "3. **s3**\n"
        "   💰 Total: S/ 5.00\n"
        "   📅 Fecha: 9/5/2024"
    )


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_utc_sale_dates_are_shown_in_local_time(monkeypatch):
    monkeypatch.setenv("TZ", "PET5")
    time.tzset()
    try:
        result = SalesResult(items=[Sale(id="s1", date="2024-05-10T03:00:00Z")])
        assert format_results(result).endswith("📅 Fecha: 9/5/2024")
    finally:
        monkeypatch.undo()
        time.tzset()


def test_generic_block_is_indented_json():
    result = GenericResult(items=[{"id": "c1", "name": "Juan Pérez"}])
    assert format_results(result) == '1. {\n  "id": "c1",\n  "name": "Juan Pérez"\n}'


def test_client_debt_record_substitution():
    result = ClientDebtResult(
        client_id="c1",
        client_name="Juan",
        total_debt=75.5,
        pending_invoices=[
            PendingInvoice(id="e1", correlative="F-001", amount=50),
            PendingInvoice(id="e3", correlative="e3", amount=25.5),
        ],
    )
    text = generate_response(TEMPLATES["get_client_debt"], ActionResult(data=result), "cuánto debe c1")
    assert text == (
        "💳 **Deuda de Juan:**\n\n"
        "💰 Total adeudado: S/ 75.50\n"
        "📄 Facturas pendientes: 2"
    )


def test_sales_today_record_fills_results():
    result = SalesTodayResult(
        count=1,
        total=30,
        sales=[Sale(id="s1", correlative="B-001", total=30, date="2024-05-10")],
    )
    text = generate_response(TEMPLATES["get_sales_today"], ActionResult(data=result), "ventas de hoy")
    assert "📈 Total ventas: 1.00" in text
    assert "💰 Monto total: S/ 30.00" in text
    assert "1. **B-001**" in text
    assert "{{" not in text


def test_sales_today_without_sales_uses_sentinel():
    text = generate_response(TEMPLATES["get_sales_today"], ActionResult(data=SalesTodayResult()), "ventas hoy")
    assert text.endswith("**Últimas ventas:**\n" + NO_RESULTS)


def test_unknown_placeholders_are_left_intact():
    text = render_template("{{count}} de {{missing}}", {"count": "3"})
    assert text == "3 de {{missing}}"


def test_substitution_is_single_pass():
    text = render_template("{{results}} / {{count}}", {"results": "{{count}}", "count": "2"})
    assert text == "{{count}} / 2"
