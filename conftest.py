"""
Repository-level pytest configuration.

Why this exists:
  - Provide defaults for the public demo storefront (its accounts are published on its login page)
  - Register command line options shared by every suite
  - Keep behavior explicit and discoverable

Real projects should load credentials from a secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


def pytest_addoption(parser):
    """Command line options for the live UI suite."""
    group = parser.getgroup("storefront", "Storefront UI options")
    group.addoption(
        "--run-ui",
        action="store_true",
        default=False,
        help="Run live browser tests against the storefront (or set RUN_UI_TESTS=1)",
    )
    group.addoption(
        "--browser",
        action="store",
        default=None,
        choices=["chromium", "firefox", "webkit"],
        help="Browser for UI tests (default: ui.browser from config.yaml)",
    )
    group.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Show the browser window",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo storefront defaults if not already provided by the user/CI.

    Values set by the environment always win.
    """
    defaults = {
        "UI_BASE_URL": "https://www.saucedemo.com",
        "UI_USERNAME": "standard_user",
        "UI_PASSWORD": "secret_sauce",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
