"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - One browser per manager, one isolated context per scenario
    - BrowserSession value handed explicitly to every Page Object
    - Browser settings from config.yaml / environment

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from storefront_suites.common.config_loader import ConfigLoader

from .sync_engine import WaitPolicy


DEFAULT_BASE_URL = "https://www.saucedemo.com"


@dataclass(frozen=True)
class BrowserSession:
    """
    Everything a Page Object needs to talk to one browsing session.

    Attributes:
        page: Playwright page owned exclusively by one scenario
        base_url: Storefront root URL (no trailing slash)
        waits: Page/probe wait budgets
    """
    page: Page
    base_url: str = DEFAULT_BASE_URL
    waits: WaitPolicy = field(default_factory=WaitPolicy)

    def url_for(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


class BrowserManager:
    """
    Manages the browser instance and per-scenario contexts.

    Usage:
        async with BrowserManager.from_config() as manager:
            session = await manager.new_session()
            login = LoginPage(session)
            await login.open()
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": ["--ignore-certificate-errors"],
    }

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        base_url: str = DEFAULT_BASE_URL,
        waits: Optional[WaitPolicy] = None,
        viewport: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            base_url: Storefront root URL
            waits: Wait budgets given to every session
            viewport: Context viewport override
        """
        self.headless = headless
        self.browser_type = browser_type
        self.base_url = base_url.rstrip("/")
        self.waits = waits or WaitPolicy()
        self.viewport = viewport

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None, **overrides: Any) -> "BrowserManager":
        """Build a manager from the `ui` and `waits` configuration sections."""
        config = config or ConfigLoader()
        ui = config.ui_settings()
        settings: Dict[str, Any] = {
            "headless": ui.headless,
            "browser_type": ui.browser,
            "base_url": ui.base_url,
            "waits": WaitPolicy.from_config(config),
            "viewport": ui.viewport,
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**settings)

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        self._browser = await browser_launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if self.viewport and "viewport" not in options:
            context_options["viewport"] = self.viewport

        context = await self._browser.new_context(**context_options)
        self._contexts.append(context)
        return context

    async def new_session(self, **context_options: Any) -> BrowserSession:
        """Open a fresh context + page and wrap it in a BrowserSession."""
        context = await self.new_context(**context_options)
        page = await context.new_page()
        logger.debug(f"New browser session for {self.base_url}")
        return BrowserSession(page=page, base_url=self.base_url, waits=self.waits)

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
    "BrowserSession",
    "DEFAULT_BASE_URL",
]
