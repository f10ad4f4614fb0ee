from __future__ import annotations

from typing import Iterator

import pytest

from settings import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch) -> Iterator[None]:
    # CliRunner swaps sys.stderr per invocation; keep handlers off those streams.
    monkeypatch.setattr("logging_config._configured", True)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
