"""Entry-point for the Bible Reader state tools."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

import typer
import uvicorn

from bible_reader.bootstrap import build_state_controller, initialize_app
from bible_reader.errors import BibleReaderError, PersistenceError
from bible_reader.logging_utils import DEFAULT_LOG_FORMAT, configure_logging, get_log_file_path
from bible_reader.services.location import ReadingLocation
from bible_reader.services.settings import TextStyle, ThemeMode
from bible_reader.services.state import DEFAULT_TEXT_SIZE_STEP, StateController
from bible_reader.ui.console import StateConsole
from bible_reader.web import create_app


LOGGER = logging.getLogger("bible_reader.cli")


cli = typer.Typer(add_completion=False, help="Bible Reader state commands")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _prepare_logging(storage_root: Path) -> None:
    log_file = get_log_file_path(storage_root)
    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    configure_logging(handlers=[file_handler])


class TextSizeAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    RESET = "reset"


def _run_with_controller(action: Callable[[StateController], Optional[Awaitable[None]]]) -> None:
    """Load the persisted state, apply *action*, flush writes and print the result."""

    config = initialize_app()
    _prepare_logging(config.storage_root)
    controller = build_state_controller(config)
    failures: List[BibleReaderError] = []
    controller.add_error_listener(failures.append)

    async def _session() -> None:
        await controller.load()
        outcome = action(controller)
        if outcome is not None:
            await outcome
        LOGGER.debug("Flushing %s pending write(s)", controller.pending_writes)
        await controller.flush()

    asyncio.run(_session())

    StateConsole(controller).render()
    persistence_failures = [failure for failure in failures if isinstance(failure, PersistenceError)]
    if persistence_failures:
        for failure in persistence_failures:
            typer.echo(f"Warning: {failure}", err=True)
        raise typer.Exit(code=1)


@cli.command()
def show(
    wait_for_content: bool = typer.Option(
        False, "--content", help="Wait for bible, commentary and appendices to load."
    ),
) -> None:
    """Render the current reader state."""

    def _show(controller: StateController) -> Optional[Awaitable[None]]:
        return controller.wait_for_content() if wait_for_content else None

    _run_with_controller(_show)


@cli.command()
def theme(mode: ThemeMode = typer.Argument(..., help="dark, light or system")) -> None:
    """Change the theme mode."""

    _run_with_controller(lambda controller: controller.update_theme_mode(mode))


@cli.command()
def style(text_style: TextStyle = typer.Argument(..., help="Reading font style")) -> None:
    """Change the reading font style."""

    _run_with_controller(lambda controller: controller.update_text_style(text_style))


@cli.command("text-size")
def text_size(
    action: TextSizeAction = typer.Argument(..., help="increase, decrease or reset"),
    amount: float = typer.Option(DEFAULT_TEXT_SIZE_STEP, min=0.0, help="Step size"),
) -> None:
    """Adjust the reading text size."""

    def _adjust(controller: StateController) -> None:
        if action is TextSizeAction.INCREASE:
            controller.increase_text_size(amount)
        elif action is TextSizeAction.DECREASE:
            controller.decrease_text_size(amount)
        else:
            controller.reset_text_size()
            # reset_text_size() does not persist; a zero step writes the restored size.
            controller.increase_text_size(0.0)

    _run_with_controller(_adjust)


@cli.command()
def resource(
    name: Optional[str] = typer.Argument(None, help="Resource identifier; omit to clear"),
) -> None:
    """Select the active resource. Clearing it also clears the reading location."""

    _run_with_controller(lambda controller: controller.update_resource(name))


@cli.command()
def goto(
    book: str = typer.Option(..., help="Book name"),
    chapter: Optional[int] = typer.Option(None, min=1, help="Chapter number"),
    verse: Optional[int] = typer.Option(None, min=1, help="Verse number"),
) -> None:
    """Move the reading location."""

    location = ReadingLocation(book=book, chapter=chapter, verse=verse)
    _run_with_controller(lambda controller: controller.update_location(location))


@cli.command()
def clear() -> None:
    """Clear the reading location."""

    _run_with_controller(lambda controller: controller.update_book_name(None))


@cli.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, help="Host interface for the web server"),
    port: int = typer.Option(DEFAULT_PORT, help="Port for the web server"),
) -> None:
    """Serve the reader state over HTTP."""

    config = initialize_app()
    _prepare_logging(config.storage_root)
    app = create_app(build_state_controller(config))
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_config=None))
    server.run()


if __name__ == "__main__":
    cli()
