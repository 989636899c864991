"""FastAPI application exposing the reader state."""

from __future__ import annotations

import contextlib
import logging
from collections import deque
from enum import Enum
from typing import Any, AsyncIterator, Deque, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..errors import BibleReaderError, StateNotLoadedError
from ..services.events import emit_structured_event
from ..services.location import ReadingLocation
from ..services.settings import TextStyle, ThemeMode
from ..services.state import StateController


LOGGER = logging.getLogger(__name__)

_ERROR_HISTORY_LIMIT = 50


class TextSizeAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    RESET = "reset"


class SettingsPayload(BaseModel):
    theme_mode: Optional[ThemeMode] = None
    text_style: Optional[TextStyle] = None
    text_size: Optional[float] = Field(None, gt=0)


class LocationPayload(BaseModel):
    resource: Optional[str] = Field(None, min_length=1)
    book: Optional[str] = Field(None, min_length=1)
    chapter: Optional[int] = Field(None, ge=1)
    verse: Optional[int] = Field(None, ge=1)


class TextSizePayload(BaseModel):
    amount: float = Field(2.0, gt=0)


def _log_event(message: str, **context: Any) -> None:
    emit_structured_event("API", message, payload=context, level=logging.INFO, logger=LOGGER)


def create_app(controller: StateController) -> FastAPI:
    """Return an application serving *controller*.

    The controller is loaded on startup and pending writes are flushed on
    shutdown.
    """

    errors: Deque[Dict[str, Any]] = deque(maxlen=_ERROR_HISTORY_LIMIT)

    def _record_error(error: BibleReaderError) -> None:
        errors.append({"type": error.__class__.__name__, "message": str(error)})

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        controller.add_error_listener(_record_error)
        if not controller.is_loaded:
            await controller.load()
        try:
            yield
        finally:
            await controller.wait_for_content()
            await controller.flush()
            controller.remove_error_listener(_record_error)

    app = FastAPI(
        title="Bible Reader",
        description="Reading position and display preferences",
        lifespan=lifespan,
    )
    app.state.controller = controller
    app.state.errors = errors

    def _snapshot() -> Dict[str, Any]:
        try:
            return controller.snapshot()
        except StateNotLoadedError as error:
            raise HTTPException(status_code=503, detail=str(error)) from error

    @app.get("/api/state")
    async def get_state() -> Dict[str, Any]:
        return {"state": _snapshot()}

    @app.put("/api/settings")
    async def update_settings(payload: SettingsPayload) -> Dict[str, Any]:
        _snapshot()
        _log_event(
            "Received settings update",
            theme_mode=payload.theme_mode,
            text_style=payload.text_style,
            text_size=payload.text_size,
        )
        controller.update_theme_mode(payload.theme_mode)
        controller.update_text_style(payload.text_style)
        controller.update_text_size(payload.text_size)
        return {"state": _snapshot()}

    @app.put("/api/location")
    async def update_location(payload: LocationPayload) -> Dict[str, Any]:
        _snapshot()
        _log_event(
            "Received location update",
            resource=payload.resource,
            book=payload.book,
            chapter=payload.chapter,
            verse=payload.verse,
        )
        # Only the fields present in the request body are applied.
        fields = payload.model_fields_set
        if "resource" in fields:
            controller.update_resource(payload.resource)
        if fields & {"book", "chapter", "verse"}:
            controller.update_location(
                ReadingLocation(book=payload.book, chapter=payload.chapter, verse=payload.verse)
            )
        return {"state": _snapshot()}

    @app.post("/api/text-size/{action}")
    async def adjust_text_size(
        action: TextSizeAction, payload: Optional[TextSizePayload] = None
    ) -> Dict[str, Any]:
        _snapshot()
        amount = (payload or TextSizePayload()).amount
        if action is TextSizeAction.INCREASE:
            controller.increase_text_size(amount)
        elif action is TextSizeAction.DECREASE:
            controller.decrease_text_size(amount)
        else:
            controller.reset_text_size()
            # reset_text_size() does not persist; a zero step writes the restored size.
            controller.increase_text_size(0.0)
        _log_event("Adjusted text size", action=action, amount=amount)
        return {"state": _snapshot()}

    @app.get("/api/errors")
    async def list_errors() -> Dict[str, Any]:
        return {"errors": list(errors)}

    return app


__all__ = ["LocationPayload", "SettingsPayload", "TextSizeAction", "create_app"]
