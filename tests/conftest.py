from __future__ import annotations

import importlib.util
import warnings

import pytest

if importlib.util.find_spec("swisseph") is None:
    warnings.warn(
        "pyswisseph not installed; Swiss-backed tests will be skipped.",
        RuntimeWarning,
        stacklevel=1,
    )


@pytest.fixture()
def natalengine_home(tmp_path, monkeypatch):
    """Point the settings home at a temporary directory."""

    home = tmp_path / "natalengine-home"
    monkeypatch.setenv("NATALENGINE_HOME", str(home))
    return home
