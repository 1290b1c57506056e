"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Tests run from the project root so that config/settings/*.yaml resolves
through the .project_root marker. Process-wide transport state and cached
configuration are reset around every test.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from caoslib.client import transport as transport_module
from caoslib.core.config import get_app_config, get_settings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _project_root_cwd(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test from the project root."""
    monkeypatch.chdir(PROJECT_ROOT)


@pytest.fixture(autouse=True)
def _isolated_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CAOSDB_* variables from the developer's shell out of tests."""
    for name in ("CAOSDB_USERNAME", "CAOSDB_PASSWORD", "CAOSDB_PASSWORD_IDENTIFIER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None, None, None]:
    """Clear cached config and TLS contexts between tests."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    transport_module.shutdown()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
    transport_module.shutdown()


# =============================================================================
# Test Settings Fixtures
# =============================================================================


@pytest.fixture
def base_url() -> str:
    """Base URL used by unit tests against stubbed transports."""
    return "https://test.local/"
