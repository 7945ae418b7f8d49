from __future__ import annotations

import sys
from pathlib import Path

import pytest

# `tests.support` and `gleam_ref` import from a plain checkout.
_ROOT = Path(__file__).resolve().parent.parent
for _path in (_ROOT, _ROOT / "src"):
    if str(_path) not in sys.path:
        sys.path.append(str(_path))


@pytest.fixture(autouse=True)
def _quiet_environment(monkeypatch):
    """Sessions start untraced whatever the developer's shell exports."""
    monkeypatch.delenv("GLEAM_TRACE", raising=False)
    monkeypatch.delenv("GLEAM_DEBUG_PY_TRACE", raising=False)


@pytest.fixture
def session():
    """A fresh interpreter session with in-memory ports."""
    from tests.support.harness import make_session

    return make_session()
