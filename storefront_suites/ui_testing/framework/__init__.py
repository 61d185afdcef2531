"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based synchronization and verification layer.

Components:
    - locators: ElementLocator values and their Playwright resolution
    - sync_engine: Bounded polling waits and probes
    - element_actions: Element interaction façade
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle and per-scenario sessions
    - pricing: Expected price summary and cart state
    - data_loader: JSON fixture data

Author: Automation Team
License: MIT
================================================================================
"""

from .assertions import AssertionMismatch, Mismatch
from .browser_manager import BrowserManager, BrowserSession
from .data_loader import DataFileError, FixtureData
from .element_actions import ElementActions, ElementIndexOutOfRangeError
from .locators import ElementLocator, UnknownLocatorError, derive_key
from .page_base import BasePage
from .pricing import CartState, MalformedPriceError, PriceSummary, compute_summary, parse_price
from .sync_engine import (
    WaitCondition,
    WaitConfig,
    WaitPolicy,
    WaitTimeoutError,
    poll,
    probe,
    wait_until,
)

__all__ = [
    "AssertionMismatch",
    "Mismatch",
    "BrowserManager",
    "BrowserSession",
    "DataFileError",
    "FixtureData",
    "ElementActions",
    "ElementIndexOutOfRangeError",
    "ElementLocator",
    "UnknownLocatorError",
    "derive_key",
    "BasePage",
    "CartState",
    "MalformedPriceError",
    "PriceSummary",
    "compute_summary",
    "parse_price",
    "WaitCondition",
    "WaitConfig",
    "WaitPolicy",
    "WaitTimeoutError",
    "poll",
    "probe",
    "wait_until",
]
