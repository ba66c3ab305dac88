"""Built-in intent set written by `seed_default_intents`."""

from __future__ import annotations

from shared.models import Intent, utc_now_iso

_DEFAULT_INTENT_FIELDS: list[dict] = [
    {
        "id": "search_client",
        "name": "Buscar Cliente",
        "description": "Busca clientes por ID o nombre",
        "keywords": ["cliente", "buscar", "encontrar", "id"],
        "action": "search_client",
        "response_template": "🔍 **Resultados de búsqueda:**\n\n{{results}}",
        "examples": ["buscar cliente Juan", "cliente ID123", "encontrar María"],
    },
    {
        "id": "get_debtors",
        "name": "Mostrar Deudores",
        "description": "Muestra lista de clientes con deudas pendientes",
        "keywords": ["deudores", "debe", "deben", "deuda", "adeuda", "crédito", "mostrar deudores", "quién debe"],
        "action": "get_debtors",
        "response_template": "💰 **Clientes con deudas pendientes ({{count}}):**\n\n{{results}}",
        "examples": ["mostrar deudores", "quién debe", "lista de deudas"],
    },
    {
        "id": "get_client_debt",
        "name": "Deuda de Cliente Específico",
        "description": "Consulta la deuda de un cliente en particular",
        "keywords": ["cuánto", "debe", "deuda", "adeuda"],
        "action": "get_client_debt",
        "response_template": (
            "💳 **Deuda de {{clientName}}:**\n\n"
            "💰 Total adeudado: S/ {{totalDebt}}\n"
            "📄 Facturas pendientes: {{pendingInvoices}}"
        ),
        "examples": ["cuánto debe Juan", "deuda cliente María", "adeuda ID123"],
    },
    {
        "id": "get_sales_today",
        "name": "Ventas del Día",
        "description": "Muestra las ventas realizadas hoy",
        "keywords": ["ventas", "hoy", "día", "diarias"],
        "action": "get_sales_today",
        "response_template": (
            "📊 **Ventas de hoy:**\n\n"
            "📈 Total ventas: {{count}}\n"
            "💰 Monto total: S/ {{total}}\n\n"
            "**Últimas ventas:**\n{{results}}"
        ),
        "examples": ["ventas del día", "ventas de hoy", "cuánto vendimos hoy"],
    },
    {
        "id": "get_products",
        "name": "Mostrar Productos",
        "description": "Muestra lista de productos disponibles",
        "keywords": ["productos", "inventario", "stock", "disponible", "mostrar productos"],
        "action": "get_products",
        "response_template": "📦 **Productos disponibles ({{count}}):**\n\n{{results}}",
        "examples": ["mostrar productos", "qué productos hay", "inventario disponible"],
    },
    {
        "id": "search_product",
        "name": "Buscar Producto",
        "description": "Busca un producto específico",
        "keywords": ["producto", "buscar", "encontrar"],
        "action": "search_product",
        "response_template": "🔍 **Resultados de búsqueda de productos:**\n\n{{results}}",
        "examples": ["buscar producto galletas", "producto coca cola", "encontrar arroz"],
    },
    {
        "id": "get_top_debtors",
        "name": "Top Deudores",
        "description": "Muestra los clientes con mayor deuda",
        "keywords": ["top", "mayor", "grandes", "deudores"],
        "action": "get_top_debtors",
        "response_template": "🏆 **Top 5 Deudores:**\n\n{{results}}",
        "examples": ["top deudores", "mayores deudas", "grandes deudores"],
    },
]


def default_intents() -> list[Intent]:
    """Fresh copies of the built-in intents, stamped with the current time."""
    now = utc_now_iso()
    return [Intent(**fields, enabled=True, created_at=now, updated_at=now) for fields in _DEFAULT_INTENT_FIELDS]
