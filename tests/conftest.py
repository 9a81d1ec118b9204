# SPDX-License-Identifier: MIT
"""Test configuration for artwork-tokens.

Keeps Logfire local, isolates settings from the caller's environment and
resets process-wide state between tests.
"""

from __future__ import annotations

import os

import logfire
import pytest

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Remove ``FX_`` overrides inherited from the shell."""

    for name in list(os.environ):
        if name.startswith("FX_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _init_runtime_env(_isolate_env):
    """Initialise a default runtime environment for tests."""

    from runtime.environment import RuntimeEnv
    from runtime.settings import load_settings

    RuntimeEnv.reset()
    RuntimeEnv.initialize(load_settings())
    yield
    RuntimeEnv.reset()


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Start every test with empty codec metrics."""

    from observability import telemetry

    telemetry.reset()
    yield
    telemetry.reset()


@pytest.fixture
def mosaic_params() -> dict:
    """Return a complete mosaic parameter set."""

    return {
        "color1": "#FF0000",
        "color2": "#00FF00",
        "color3": "#0000FF",
        "color4": "#FFFFFF",
        "initialRectMinSize": 0.25,
        "initialRectMaxSize": 0.75,
        "gridDivisionChance": 0.5,
        "recursionChance": 0.35,
        "minGridRows": 2,
        "maxGridRows": 5,
        "minGridCols": 2,
        "maxGridCols": 5,
        "splitRatioMin": 0.3,
        "splitRatioMax": 0.7,
        "marginMultiplier": 0.02,
        "detailGridMin": 3,
        "detailGridMax": 7,
        "noiseDensity": 0.15,
        "minRecursionSize": 40,
        "canvasWidth": 630,
        "canvasHeight": 790,
        "token": "fx-mosaic-SEED123",
        "colorSeed": "fx-mosaic-SEED123",
        "exportWidth": 1600,
        "exportHeight": 2000,
    }
