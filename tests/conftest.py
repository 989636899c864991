from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bible_reader.bootstrap import Bootstrapper
from bible_reader.config import AppConfig
from bible_reader.services.content import ContentResources
from bible_reader.services.settings import SettingsRepository
from bible_reader.services.state import StateController
from bible_reader.services.store import MemoryPreferenceStore


class StaticContent:
    """Content resource resolving to *value* once ``release`` is set."""

    def __init__(self, value: Any = None, *, error: Optional[BaseException] = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0
        self.release: Optional[asyncio.Event] = None

    def hold(self) -> "StaticContent":
        self.release = asyncio.Event()
        return self

    async def load(self) -> Any:
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.value


def make_content(**overrides: StaticContent) -> ContentResources:
    resources: Dict[str, StaticContent] = {
        "bible": StaticContent({"Genesis": {}}),
        "commentary": StaticContent({"notes": []}),
        "appendices": StaticContent({"maps": []}),
    }
    resources.update(overrides)
    return ContentResources(**resources)


@pytest.fixture()
def temp_config(tmp_path: Path) -> AppConfig:
    config = AppConfig.from_mapping(
        {
            "storage_root": "storage",
            "database_file": "storage/preferences.db",
            "content_root": "content",
        },
        base_path=tmp_path,
    )
    config.content_root.mkdir(parents=True, exist_ok=True)
    Bootstrapper(config).initialize()
    return config


@pytest.fixture()
def memory_store() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()


@pytest.fixture()
def controller(memory_store: MemoryPreferenceStore) -> StateController:
    return StateController(SettingsRepository(memory_store))
