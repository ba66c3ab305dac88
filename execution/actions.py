"""
Action Executor — named query handlers over the Data Gateway.

Responsibility:
- Map an intent's action name to one fixed handler
- Extract a search term from the utterance when the handler needs one
- Read domain records (clients, ledger, sales, products) and tag the result

Prohibitions:
- Never writes domain records
- Never raises: every failure becomes ActionResult(error=...)
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Awaitable, Callable, Iterable

from gateway.base import DataGateway, is_valid_key
from shared.config import DataPaths
from shared.models import (
    ActionResult,
    Client,
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

logger = logging.getLogger(__name__)

UNKNOWN_ACTION_ERROR = "Acción no reconocida"

COMMON_STOP_WORDS = ("el", "la", "los", "las", "un", "una", "de", "del", "por", "para", "con")
_PUNCTUATION = re.compile(r"[¿?¡!.,;:]")
_WHITESPACE = re.compile(r"\s+")

SEARCH_CLIENT_STOP_WORDS = ("cliente", "buscar", "encontrar", "id")
CLIENT_DEBT_STOP_WORDS = ("cliente", "cuánto", "cuanto", "debe", "deuda", "adeuda")
SEARCH_PRODUCT_STOP_WORDS = ("producto", "buscar", "encontrar")

RECENT_SALES_LIMIT = 10
TODAY_SALES_LIMIT = 5
TOP_DEBTORS_LIMIT = 5


def extract_search_term(message: str, stop_words: Iterable[str]) -> str:
    """Remove stop words (whole words, any case) and punctuation; collapse whitespace."""
    cleaned = _PUNCTUATION.sub(" ", message or "")
    for word in (*stop_words, *COMMON_STOP_WORDS):
        cleaned = re.sub(rf"\b{re.escape(word)}\b", " ", cleaned, flags=re.IGNORECASE)
    return _WHITESPACE.sub(" ", cleaned).strip()


def _as_amount(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _iter_children(node: Any) -> Iterable[tuple[str, Any]]:
    """(key, value) pairs of a stored collection; the store may return maps or arrays."""
    if isinstance(node, dict):
        return ((str(k), v) for k, v in node.items())
    if isinstance(node, list):
        return ((str(i), v) for i, v in enumerate(node) if v is not None)
    return iter(())


def _sale_date(sale: dict[str, Any]) -> str | None:
    value = sale.get("date") or sale.get("createdAt")
    return str(value) if value else None


def _to_sale(sale_id: str, raw: dict[str, Any]) -> Sale:
    extra = {k: v for k, v in raw.items() if k not in {"id", "correlative", "total", "date"}}
    return Sale(
        id=sale_id,
        correlative=str(raw["correlative"]) if raw.get("correlative") else None,
        total=_as_amount(raw["total"]) if raw.get("total") is not None else None,
        date=_sale_date(raw),
        **extra,
    )


def _as_text(value: Any, default: str) -> str:
    """Store scalars (numbers included) as display text; falsy values use `default`."""
    if not value:
        return default
    return str(value)


def _as_stock(value: Any) -> int | float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    amount = _as_amount(value)
    return int(amount) if amount.is_integer() else amount


def _to_product(product_id: str, raw: dict[str, Any]) -> Product:
    return Product(
        id=product_id,
        name=_as_text(raw.get("name"), "Sin nombre"),
        price=_as_amount(raw.get("price")),
        stock=_as_stock(raw.get("stock")),
        category=_as_text(raw.get("category"), "Sin categoría"),
    )


Handler = Callable[[str], Awaitable[ActionResult]]


class ActionExecutor:
    """Dispatches action names to query handlers."""

    def __init__(
        self,
        gateway: DataGateway,
        paths: DataPaths | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.gateway = gateway
        self.paths = paths or DataPaths()
        self.today = today
        self._handlers: dict[str, Handler] = {
            "search_client": self.search_client,
            "get_debtors": self.get_debtors,
            "get_sales": self.get_sales,
            "get_products": self.get_products,
            "get_client_debt": self.get_client_debt,
            "get_sales_today": self.get_sales_today,
            "get_top_debtors": self.get_top_debtors,
            "search_product": self.search_product,
        }

    @property
    def known_actions(self) -> list[str]:
        return list(self._handlers.keys())

    async def execute_action(self, action: str, message: str) -> ActionResult:
        handler = self._handlers.get(action)
        if handler is None:
            logger.warning("Unknown action requested: %s", action)
            return ActionResult(error=UNKNOWN_ACTION_ERROR)
        try:
            return await handler(message)
        except Exception:
            logger.exception("Action '%s' failed outside its handler", action)
            return ActionResult(error="Error ejecutando la consulta")

    # ─── Clients ───────────────────────────────────────────────

    async def search_client(self, message: str) -> ActionResult:
        try:
            term = extract_search_term(message, SEARCH_CLIENT_STOP_WORDS)
            if not term:
                return ActionResult(error="No se pudo extraer el término de búsqueda para el cliente")

            clients = await self.gateway.get(self.paths.clients)
            if not clients:
                return ActionResult(error="No se encontraron clientes en la base de datos")

            needle = term.lower()
            matches: list[dict[str, Any]] = []
            for client_id, client in _iter_children(clients):
                if not isinstance(client, dict):
                    continue
                name = _as_text(client.get("name"), "")
                full_name = _as_text(client.get("fullName"), "")
                if needle in client_id.lower() or needle in name.lower() or needle in full_name.lower():
                    record = Client(
                        id=client_id,
                        name=name or full_name or "Sin nombre",
                        phone=_as_text(client.get("phone"), "No disponible"),
                        email=_as_text(client.get("email"), "No disponible"),
                    )
                    matches.append(record.model_dump(by_alias=True))
            return ActionResult(data=GenericResult(items=matches))
        except Exception:
            logger.exception("Error searching clients")
            return ActionResult(error="Error buscando clientes")

    # ─── Accounts receivable ───────────────────────────────────

    async def _collect_debtors(self) -> list[Debtor]:
        ledger = await self.gateway.get(self.paths.accounts_receivable)
        debtors: list[Debtor] = []
        for client_id, client_ledger in _iter_children(ledger):
            if not isinstance(client_ledger, dict) or not client_ledger.get("entries"):
                continue
            entries = [entry for _, entry in _iter_children(client_ledger["entries"]) if isinstance(entry, dict)]
            pending = [entry for entry in entries if entry.get("status") == "pending"]
            total_debt = sum(_as_amount(entry.get("amount")) for entry in pending)
            if total_debt <= 0:
                continue
            client_name = next((str(e["clientName"]) for e in entries if e.get("clientName")), client_id)
            debtors.append(
                Debtor(
                    client_id=client_id,
                    client_name=client_name,
                    total_debt=total_debt,
                    pending_invoices=len(pending),
                )
            )
        debtors.sort(key=lambda d: d.total_debt, reverse=True)
        return debtors

    async def get_debtors(self, message: str = "") -> ActionResult:
        try:
            return ActionResult(data=DebtorsResult(items=await self._collect_debtors()))
        except Exception:
            logger.exception("Error getting debtors")
            return ActionResult(error="Error obteniendo deudores")

    async def get_top_debtors(self, message: str = "") -> ActionResult:
        try:
            debtors = await self._collect_debtors()
            return ActionResult(data=DebtorsResult(items=debtors[:TOP_DEBTORS_LIMIT]))
        except Exception:
            logger.exception("Error getting top debtors")
            return ActionResult(error="Error obteniendo top deudores")

    async def get_client_debt(self, message: str) -> ActionResult:
        try:
            client_id = extract_search_term(message, CLIENT_DEBT_STOP_WORDS)
            if not client_id or not is_valid_key(client_id):
                return ActionResult(error="No se pudo identificar el cliente")

            client_ledger = await self.gateway.get(f"{self.paths.accounts_receivable}/{client_id}")
            if not isinstance(client_ledger, dict) or not client_ledger.get("entries"):
                return ActionResult(data=ClientDebtResult(client_id=client_id, client_name=client_id))

            total_debt = 0.0
            invoices: list[PendingInvoice] = []
            client_name = client_id
            for entry_id, entry in _iter_children(client_ledger["entries"]):
                if not isinstance(entry, dict):
                    continue
                if client_name == client_id and entry.get("clientName"):
                    client_name = str(entry["clientName"])
                if entry.get("status") != "pending":
                    continue
                total_debt += _as_amount(entry.get("amount"))
                invoices.append(
                    PendingInvoice(
                        id=entry_id,
                        correlative=str(entry.get("correlative") or entry_id),
                        amount=_as_amount(entry.get("amount")),
                        date=str(entry["date"]) if entry.get("date") else None,
                    )
                )

            return ActionResult(
                data=ClientDebtResult(
                    client_id=client_id,
                    client_name=client_name,
                    total_debt=total_debt,
                    pending_invoices=invoices,
                )
            )
        except Exception:
            logger.exception("Error getting client debt")
            return ActionResult(error="Error obteniendo deuda del cliente")

    # ─── Sales ─────────────────────────────────────────────────

    async def _load_sales(self) -> list[Sale]:
        sales = await self.gateway.get(self.paths.sales)
        return [_to_sale(sale_id, raw) for sale_id, raw in _iter_children(sales) if isinstance(raw, dict)]

    async def get_sales(self, message: str = "") -> ActionResult:
        try:
            sales = await self._load_sales()
            # ISO-8601 strings sort chronologically; undated sales go last.
            sales.sort(key=lambda s: s.date or "", reverse=True)
            return ActionResult(data=SalesResult(items=sales[:RECENT_SALES_LIMIT]))
        except Exception:
            logger.exception("Error getting sales")
            return ActionResult(error="Error obteniendo ventas")

    async def get_sales_today(self, message: str = "") -> ActionResult:
        try:
            today = self.today().isoformat()
            todays_sales = [sale for sale in await self._load_sales() if (sale.date or "").split("T")[0] == today]
            total = sum(_as_amount(sale.total) for sale in todays_sales)
            return ActionResult(
                data=SalesTodayResult(
                    count=len(todays_sales),
                    total=total,
                    sales=todays_sales[:TODAY_SALES_LIMIT],
                )
            )
        except Exception:
            logger.exception("Error getting today's sales")
            return ActionResult(error="Error obteniendo ventas del día")

    # ─── Products ──────────────────────────────────────────────

    async def get_products(self, message: str = "") -> ActionResult:
        try:
            products = await self.gateway.get(self.paths.products)
            items = [_to_product(pid, raw) for pid, raw in _iter_children(products) if isinstance(raw, dict)]
            return ActionResult(data=ProductsResult(items=items))
        except Exception:
            logger.exception("Error getting products")
            return ActionResult(error="Error obteniendo productos")

    async def search_product(self, message: str) -> ActionResult:
        try:
            term = extract_search_term(message, SEARCH_PRODUCT_STOP_WORDS)
            if not term:
                return ActionResult(error="No se pudo extraer el término de búsqueda para el producto")

            products = await self.gateway.get(self.paths.products)
            needle = term.lower()
            items = [
                _to_product(pid, raw)
                for pid, raw in _iter_children(products)
                if isinstance(raw, dict)
                and (needle in pid.lower() or needle in str(raw.get("name") or "").lower())
            ]
            return ActionResult(data=ProductsResult(items=items))
        except Exception:
            logger.exception("Error searching products")
            return ActionResult(error="Error buscando productos")
