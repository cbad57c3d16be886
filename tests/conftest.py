import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("APP_ENV", "development")

from crm_export.core.settings import get_settings
from fakes import InMemoryStore


@pytest.fixture()
def store():
    return InMemoryStore()


@pytest.fixture()
def production_mode(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
