# tests/conftest.py
"""
Global test bootstrap
- Pins logging/env so importing glacier never writes files or reads a real secret
- Exposes the anyio backend and a loguru capture fixture
- Pulls in shared fixtures (db, tokens, storage)
"""

from __future__ import annotations

import os

import pytest
from loguru import logger

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set BEFORE importing glacier so module-level settings see it)
# ──────────────────────────────────────────────────────────────────────────────
os.environ["LOG_TO_FILE"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["GLACIER_DOWNLOAD_SECRET"] = ""
os.environ.pop("GLACIER_PATH", None)

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Pull in the rest of the fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *        # noqa: F401,F403,E402
from tests.fixtures.tokens import *    # noqa: F401,F403,E402
from tests.fixtures.storage import *   # noqa: F401,F403,E402


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def log_records():
    """
    ✅ Collect loguru records (DEBUG and up) emitted during the test.
    Each item is the loguru `record` dict: `["message"]`, `["level"].name`, `["extra"]`.
    """
    records: list[dict] = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)
