"""
Fallback Handler — canned replies when no intent clears the threshold.

Responsibility:
- Help text for help-seeking messages
- Generic "not sure" prompt otherwise

Prohibitions:
- No gateway reads, no intent matching
"""

import logging

from shared.models import ChatResponse

logger = logging.getLogger(__name__)

HELP_WORDS = ("ayuda", "help")

HELP_TEXT = (
    "🤖 **Puedo ayudarte con:**\n\n"
    "• Buscar clientes: \"buscar cliente Juan\" o \"cliente ID123\"\n"
    "• Ver deudores: \"mostrar deudores\" o \"quién debe\"\n"
    "• Consultar ventas: \"ventas del día\" o \"últimas ventas\"\n"
    "• Buscar productos: \"producto galletas\" o \"productos disponibles\"\n"
    "• Deuda específica: \"cuánto debe María\" o \"deuda cliente ID456\"\n\n"
    "💡 **Ejemplos:**\n"
    "\"¿Cuánto debe el cliente Juan?\"\n"
    "\"Mostrar productos con stock\"\n"
    "\"Ventas de hoy\"\n"
    "\"Top 5 deudores\""
)

NOT_SURE_TEXT = (
    "🤔 No estoy seguro de cómo ayudarte con eso. \n\n"
    "Puedes preguntar sobre:\n"
    "• Clientes y deudas\n"
    "• Ventas y productos\n"
    "• Escribe \"ayuda\" para ver más opciones"
)


class FallbackHandler:
    """Replies for unmatched messages."""

    async def handle_fallback(self, message: str) -> ChatResponse:
        lowered = (message or "").lower()
        if any(word in lowered for word in HELP_WORDS):
            logger.info("Fallback: help requested")
            return ChatResponse(message=HELP_TEXT, type="normal")

        logger.info("Fallback: no intent matched")
        return ChatResponse(message=NOT_SURE_TEXT, type="normal")
