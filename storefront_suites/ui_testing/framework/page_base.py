"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Explicit session injection (no ambient browser state)
    - Element id -> ElementLocator lookup (LocatorSource protocol)
    - Façade shortcuts addressed by element id
    - Loaded-state probes and blocking waits
    - Shared header: title, cart link/badge, side menu
    - Screenshot and failure capture utilities

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger

from .assertions import Mismatch, raise_mismatches
from .browser_manager import BrowserSession
from .element_actions import ElementActions
from .locators import ElementLocator, UnknownLocatorError
from .sync_engine import WaitCondition, WaitConfig, WaitResult, probe, wait_until


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"


# Header and side menu present on every logged-in screen
COMMON_LOCATORS: Dict[str, ElementLocator] = {
    "title": ElementLocator.css('[data-test="title"]', "Page title"),
    "cart_link": ElementLocator.css('[data-test="shopping-cart-link"]', "Shopping cart link"),
    "cart_badge": ElementLocator.css('[data-test="shopping-cart-badge"]', "Shopping cart badge"),
    "menu_button": ElementLocator.css("#react-burger-menu-btn", "Open menu button"),
    "menu_close": ElementLocator.css("#react-burger-cross-btn", "Close menu button"),
    "inventory_link": ElementLocator.css('[data-test="inventory-sidebar-link"]', "All items link"),
    "logout_link": ElementLocator.css('[data-test="logout-sidebar-link"]', "Logout link"),
    "reset_link": ElementLocator.css('[data-test="reset-sidebar-link"]', "Reset app state link"),
}


class BasePage:
    """
    Base class for all page objects.

    Subclasses declare their elements in LOCATORS and how to recognise the
    screen via LOADED_MARKER / LOADED_TEXT.

    Usage:
        class CartPage(BasePage):
            URL_PATH = "/cart.html"
            LOADED_TEXT = "Your Cart"
            LOCATORS = {"checkout": ElementLocator.css('[data-test="checkout"]')}

            async def checkout(self):
                await self.click("checkout")
    """

    # Override in subclasses
    URL_PATH: str = "/"
    SCREEN: str = "Page"
    LOADED_MARKER: str = "title"
    LOADED_TEXT: Optional[str] = None
    LOCATORS: Dict[str, ElementLocator] = {}

    def __init__(self, session: BrowserSession):
        """
        Initialize page object.

        Args:
            session: Browsing session owned by the calling scenario
        """
        self.session = session
        self.page = session.page
        self.base_url = session.base_url.rstrip("/")
        self.actions = ElementActions(session.page, session.waits)

    # =========================================================================
    # Locators
    # =========================================================================

    def locate(self, element_id: str, **params: Any) -> ElementLocator:
        """
        Look up an element declared by this page (or the shared header).

        Args:
            element_id: Key in LOCATORS / COMMON_LOCATORS
            **params: Values for template placeholders

        Raises:
            UnknownLocatorError: if the id is not declared
        """
        template = self.LOCATORS.get(element_id) or COMMON_LOCATORS.get(element_id)
        if template is None:
            raise UnknownLocatorError(f"{type(self).__name__} declares no element '{element_id}'")
        return template.format(**params)

    # =========================================================================
    # Navigation
    # =========================================================================

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    async def navigate(self, wait_for: str = "load") -> None:
        """
        Navigate directly to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")

    async def wait_for_page_load(self, state: str = "load", timeout: int = 15000) -> None:
        """Wait for the page to reach a Playwright load state (timeout in ms)."""
        await self.page.wait_for_load_state(state, timeout=timeout)

    @property
    def current_url(self) -> str:
        return self.page.url

    # =========================================================================
    # Element Interactions by id
    # =========================================================================

    async def click(self, element_id: str, **params: Any) -> None:
        await self.actions.click(self.locate(element_id, **params))

    async def fill(self, element_id: str, value: str, **params: Any) -> None:
        await self.actions.fill(self.locate(element_id, **params), value)

    async def get_text(self, element_id: str, **params: Any) -> str:
        return await self.actions.get_text(self.locate(element_id, **params))

    async def is_visible(self, element_id: str, **params: Any) -> bool:
        return await self.actions.is_visible(self.locate(element_id, **params))

    async def count(self, element_id: str, **params: Any) -> int:
        return await self.actions.count(self.locate(element_id, **params))

    async def get_all_texts(self, element_id: str, **params: Any) -> List[str]:
        return await self.actions.get_all_texts(self.locate(element_id, **params))

    async def wait_for(
        self,
        element_id: str,
        condition: WaitCondition = WaitCondition.VISIBLE,
        config: Optional[WaitConfig] = None,
        **params: Any,
    ) -> WaitResult:
        return await self.actions.wait_for(self.locate(element_id, **params), condition, config)

    # =========================================================================
    # Loaded State
    # =========================================================================

    def _loaded_predicate(self):
        marker = self.actions.resolve(self.locate(self.LOADED_MARKER)).first

        async def check() -> bool:
            if not await marker.is_visible():
                return False
            if self.LOADED_TEXT is None:
                return True
            return (await marker.text_content() or "").strip() == self.LOADED_TEXT

        return check

    async def is_loaded(self, config: Optional[WaitConfig] = None) -> bool:
        """Probe: is this screen currently displayed?"""
        return await probe(
            self._loaded_predicate(),
            f"{self.SCREEN} loaded",
            config or self.session.waits.probe,
        )

    async def wait_until_loaded(self, config: Optional[WaitConfig] = None) -> WaitResult:
        """
        Block until this screen is displayed.

        Raises:
            WaitTimeoutError: if it does not appear within the page budget
        """
        with allure.step(f"Wait for {self.SCREEN}"):
            return await wait_until(
                self._loaded_predicate(),
                f"{self.SCREEN} loaded",
                config or self.session.waits.page,
            )

    async def assert_loaded(self) -> None:
        """Hard assertion helper used by tests."""
        if await self.is_loaded():
            return
        observed = None
        if await self.actions.count(self.locate(self.LOADED_MARKER)):
            observed = (await self.actions.get_all_texts(self.locate(self.LOADED_MARKER)))[0]
        raise_mismatches(
            [Mismatch(self.LOADED_MARKER, self.LOADED_TEXT or "visible", observed)],
            context=self.SCREEN,
        )

    async def get_title(self) -> str:
        return await self.get_text("title")

    async def verify_elements_visible(self, *element_ids: str) -> None:
        """Assert that each listed element is visible."""
        missing = [
            Mismatch(element_id, "visible", "not visible")
            for element_id in element_ids
            if not await self.is_visible(element_id)
        ]
        raise_mismatches(missing, context=self.SCREEN)

    # =========================================================================
    # Shared Header
    # =========================================================================

    async def get_cart_badge_count(self) -> Optional[int]:
        """Items shown on the cart badge, or None when the badge is absent."""
        if not await self.is_visible("cart_badge"):
            return None
        return int(await self.get_text("cart_badge"))

    async def wait_for_cart_badge(
        self,
        expected: Optional[int],
        config: Optional[WaitConfig] = None,
    ) -> WaitResult:
        """
        Block until the badge shows `expected` (None = badge absent).

        Raises:
            WaitTimeoutError: if the badge does not settle in time
        """
        badge = self.actions.resolve(self.locate("cart_badge")).first

        async def check() -> bool:
            shown = await badge.is_visible()
            if expected is None:
                return not shown
            return shown and (await badge.text_content() or "").strip() == str(expected)

        label = "absent" if expected is None else f"'{expected}'"
        return await wait_until(check, f"cart badge {label}", config or self.session.waits.page)

    @allure.step("Open shopping cart")
    async def open_cart(self) -> None:
        await self.click("cart_link")

    @allure.step("Open side menu")
    async def open_menu(self) -> None:
        await self.click("menu_button")
        await self.wait_for("logout_link")

    @allure.step("Close side menu")
    async def close_menu(self) -> None:
        await self.click("menu_close")
        await self.wait_for("logout_link", WaitCondition.HIDDEN)

    @allure.step("Logout")
    async def logout(self) -> None:
        await self.open_menu()
        await self.click("logout_link")

    @allure.step("Reset app state")
    async def reset_app_state(self) -> None:
        await self.open_menu()
        await self.click("reset_link")
        await self.close_menu()

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach.file(
                str(filepath),
                name=name,
                attachment_type=allure.attachment_type.PNG,
            )

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """Attach a screenshot and the current URL to the report."""
        with allure.step("Capture failure details"):
            await self.screenshot(f"failure_{test_name}", attach_to_allure=True)
            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )


__all__ = [
    "BasePage",
    "COMMON_LOCATORS",
]
