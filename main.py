"""
POS Chat Assistant — Main CLI Entrypoint.

Wires gateway, engine and conversation log, and runs the interactive loop.
"""

import argparse
import asyncio
import logging
import uuid

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from conversation.analytics import compute_chat_metrics
from conversation.manager import ConversationManager
from gateway import build_gateway
from orchestrator.orchestrator import ChatBotService
from shared.config import Settings
from shared.models import ChatResponse, Intent

logger = logging.getLogger(__name__)

LOG_LEVEL = logging.INFO
EXIT_WORDS = {"exit", "quit", "salir"}

# ─── Rich Console ───────────────────────────────────────────────

console = Console()

_TYPE_STYLES = {
    "data": ("green", "📊"),
    "normal": ("cyan", "🤖"),
    "error": ("red", "⚠️"),
    "welcome": ("magenta", "👋"),
}


def setup_logging() -> None:
    """Configure logging."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_service(settings: Settings) -> ChatBotService:
    gateway = build_gateway(settings)
    logger.info("Data gateway: %s", settings.gateway_backend)
    return ChatBotService(gateway, paths=settings.paths)


async def prepare_intents(service: ChatBotService, settings: Settings) -> list[Intent]:
    if settings.seed_default_intents:
        return await service.load_or_seed_intents()
    return await service.load_intents()


def render_bot_text(text: str, kind: str | None, intent: str | None = None) -> None:
    style, icon = _TYPE_STYLES.get(kind or "normal", _TYPE_STYLES["normal"])
    title = f"{icon} {intent}" if intent else icon
    console.print(Panel(Text(text), title=title, border_style=style, box=box.ROUNDED))


def render_response(response: ChatResponse) -> None:
    render_bot_text(response.message, response.type, response.intent)


def render_intents(intents: list[Intent]) -> None:
    table = Table(title="Chat Intents")
    table.add_column("ID", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("Keywords", style="dim")
    table.add_column("Enabled", style="green")
    for intent in intents:
        table.add_row(intent.id, intent.action, ", ".join(intent.keywords), str(intent.enabled))
    console.print(table)


def render_stats(conversation: ConversationManager, session_id: str) -> None:
    metrics = compute_chat_metrics(conversation.get_history(session_id))
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 1))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Mensajes", str(metrics.total_messages))
    table.add_row("Usuario / Bot", f"{metrics.user_messages} / {metrics.bot_messages}")
    table.add_row("Datos / Normal / Error", f"{metrics.data_messages} / {metrics.normal_messages} / {metrics.error_messages}")
    table.add_row("Tasa de éxito", f"{metrics.success_rate:.1f}%")
    for usage in metrics.top_intents:
        table.add_row(f"  {usage.intent}", str(usage.count))
    console.print(Panel(table, title="📈 Analytics", border_style="dim", box=box.ROUNDED))


async def run_chat_loop(settings: Settings) -> None:
    """Interactive chat loop."""
    service = build_service(settings)
    conversation = ConversationManager(db_path=settings.chat_db_path)
    session_id = uuid.uuid4().hex

    console.print(Panel(
        Text.from_markup(
            "[bold cyan]POS Chat Assistant[/bold cyan]\n"
            f"[dim]Backend: {settings.gateway_backend} • Session: {session_id[:8]}[/dim]\n"
            "[dim]Type your question, 'stats' for analytics or 'exit' to quit[/dim]"
        ),
        title="🤖",
        border_style="cyan",
        box=box.DOUBLE,
    ))

    try:
        intents = await prepare_intents(service, settings)
        logger.info("Loaded %d intents", len(intents))

        welcome = service.welcome_message()
        conversation.save_message(session_id, welcome)
        render_bot_text(welcome.text, welcome.type)

        while True:
            try:
                user_text = console.input("[bold blue]> [/bold blue]").strip()
            except EOFError:
                break
            if not user_text:
                continue
            if user_text.lower() in EXIT_WORDS:
                break
            if user_text.lower() == "stats":
                render_stats(conversation, session_id)
                continue

            conversation.save_message(session_id, service.to_user_message(user_text))
            with console.status("[yellow]Consultando...[/yellow]", spinner="dots"):
                response = await service.process_message(user_text, intents)
            conversation.save_message(session_id, service.to_bot_message(response))
            render_response(response)
    finally:
        conversation.close()
        await service.close()


async def ask_once(settings: Settings, text: str) -> ChatResponse:
    service = build_service(settings)
    try:
        intents = await prepare_intents(service, settings)
        return await service.process_message(text, intents)
    finally:
        await service.close()


async def admin_list_intents(settings: Settings) -> list[Intent]:
    service = build_service(settings)
    try:
        return await service.load_intents()
    finally:
        await service.close()


async def admin_seed_intents(settings: Settings) -> list[Intent]:
    service = build_service(settings)
    try:
        return await service.seed_default_intents()
    finally:
        await service.close()


def serve(settings: Settings, host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    from api.server import create_app

    uvicorn.run(create_app(settings=settings), host=host or settings.api_host, port=port or settings.api_port)


def main() -> None:
    """Entrypoint with CLI args."""
    setup_logging()
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="POS Chat Assistant")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("run", help="Run interactive chat")

    ask_parser = subparsers.add_parser("ask", help="Answer a single message")
    ask_parser.add_argument("text", help="Message text")

    subparsers.add_parser("intents-list", help="List stored intents")
    subparsers.add_parser("intents-seed", help="Overwrite stored intents with the built-in set")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help=f"Bind host (default: {settings.api_host})")
    serve_parser.add_argument("--port", type=int, default=None, help=f"Bind port (default: {settings.api_port})")

    args = parser.parse_args()

    if args.command == "ask":
        render_response(asyncio.run(ask_once(settings, args.text)))
    elif args.command == "intents-list":
        render_intents(asyncio.run(admin_list_intents(settings)))
    elif args.command == "intents-seed":
        intents = asyncio.run(admin_seed_intents(settings))
        console.print(f"[green]Seeded {len(intents)} intents[/green]")
        render_intents(intents)
    elif args.command == "serve":
        serve(settings, host=args.host, port=args.port)
    elif args.command == "run" or args.command is None:
        try:
            asyncio.run(run_chat_loop(settings))
        except KeyboardInterrupt:
            pass
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
