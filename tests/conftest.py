"""Pytest configuration for WalletBridge tests."""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

from walletbridge.config.model import RuntimeConfig

from .mocks import NEM2_SAMPLES, NEM_SAMPLES, FakeUi, make_device

_HAS_PYTEST_ASYNCIO = importlib.util.find_spec("pytest_asyncio") is not None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test to run on asyncio loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Fallback asyncio runner when pytest-asyncio is unavailable."""
    if _HAS_PYTEST_ASYNCIO:
        return None
    if "asyncio" not in pyfuncitem.keywords:
        return None
    test_function = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_function):
        return None

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        kwargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
        loop.run_until_complete(test_function(**kwargs))
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        except (RuntimeError, ValueError):
            pass
        loop.close()
        asyncio.set_event_loop(None)
    return True


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    """Close and remove all logging handlers after each test to prevent ResourceWarnings."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass
        root.removeHandler(handler)


@pytest.fixture
def device() -> MagicMock:
    return make_device()


@pytest.fixture
def ui() -> FakeUi:
    return FakeUi()


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    return RuntimeConfig()


@pytest.fixture
def nem2_samples() -> dict[str, dict[str, Any]]:
    return {name: dict(sample) for name, sample in NEM2_SAMPLES.items()}


@pytest.fixture
def nem_samples() -> dict[str, dict[str, Any]]:
    return {name: dict(sample) for name, sample in NEM_SAMPLES.items()}
