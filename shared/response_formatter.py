from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Mapping

from shared.models import (
    ActionResult,
    ClientDebtResult,
    Debtor,
    DebtorsResult,
    GenericResult,
    ListResult,
    Product,
    ProductsResult,
    Sale,
    SalesResult,
    SalesTodayResult,
)

NO_RESULTS = "No se encontraron resultados."
ERROR_PREFIX = "❌"

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(template: str, substitutions: Mapping[str, str]) -> str:
    """
    Resolve every `{{key}}` in one pass from `substitutions`.
    Placeholders without a substitution are left as written.
    """

    def repl(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in substitutions:
            return substitutions[key]
        return match.group(0)

    return _PLACEHOLDER.sub(repl, template or "")


def _amount(value: float | None) -> str:
    if value is None:
        return "0.00"
    return f"{float(value):.2f}"


def _format_date(value: str | None) -> str:
    """ISO date/datetime -> local d/m/yyyy; unparseable values are shown as stored."""
    if not value:
        return "N/A"
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return f"{parsed.day}/{parsed.month}/{parsed.year}"


def _debtor_block(index: int, debtor: Debtor) -> str:
    return (
        f"{index}. **{debtor.client_name}** (ID: {debtor.client_id})\n"
        f"   💰 Deuda: S/ {_amount(debtor.total_debt)}\n"
        f"   📄 Facturas pendientes: {debtor.pending_invoices}"
    )


def _product_block(index: int, product: Product) -> str:
    return (
        f"{index}. **{product.name}**\n"
        f"   💰 Precio: S/ {_amount(product.price)}\n"
        f"   📦 Stock: {product.stock}\n"
        f"   🏷️ Categoría: {product.category}"
    )


def _sale_block(index: int, sale: Sale) -> str:
    return (
        f"{index}. **{sale.correlative or sale.id}**\n"
        f"   💰 Total: S/ {_amount(sale.total)}\n"
        f"   📅 Fecha: {_format_date(sale.date)}"
    )


def _generic_block(index: int, item: dict[str, Any]) -> str:
    return f"{index}. {json.dumps(item, indent=2, ensure_ascii=False, default=str)}"


def _format_sales(sales: list[Sale]) -> str:
    return "\n\n".join(_sale_block(i, sale) for i, sale in enumerate(sales, start=1))


def format_results(result: ListResult) -> str:
    """Numbered blocks, one per item, separated by a blank line."""
    if isinstance(result, DebtorsResult):
        blocks = [_debtor_block(i, item) for i, item in enumerate(result.items, start=1)]
    elif isinstance(result, ProductsResult):
        blocks = [_product_block(i, item) for i, item in enumerate(result.items, start=1)]
    elif isinstance(result, SalesResult):
        blocks = [_sale_block(i, item) for i, item in enumerate(result.items, start=1)]
    else:
        blocks = [_generic_block(i, item) for i, item in enumerate(result.items, start=1)]
    return "\n\n".join(blocks)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return f"{value:.2f}"
    if isinstance(value, list):
        return str(len(value))
    return str(value)


def _record_substitutions(result: ClientDebtResult | SalesTodayResult) -> dict[str, str]:
    payload = result.model_dump(by_alias=True, exclude={"kind"})
    substitutions = {key: _scalar(value) for key, value in payload.items() if value is not None}
    if isinstance(result, SalesTodayResult):
        substitutions["results"] = _format_sales(result.sales) if result.sales else NO_RESULTS
    return substitutions


def generate_response(template: str, result: ActionResult, original_message: str = "") -> str:
    """
    Render an intent's template against an action result:
    - error wins over everything
    - no data -> template verbatim
    - list results fill {{results}} / {{count}}
    - record results fill one placeholder per field
    """
    if result.error:
        return f"{ERROR_PREFIX} {result.error}"

    data = result.data
    if data is None:
        return template

    if isinstance(data, (DebtorsResult, ProductsResult, SalesResult, GenericResult)):
        if not data.items:
            return render_template(template, {"results": NO_RESULTS, "count": "0"})
        return render_template(template, {"results": format_results(data), "count": str(len(data.items))})

    return render_template(template, _record_substitutions(data))
