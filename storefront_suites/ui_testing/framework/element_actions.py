# ================================================================================
# Element Actions Module
# ================================================================================
#
# Typed element interactions shared by every Page Object. Each action
# resolves its ElementLocator, waits through the synchronization engine,
# then acts.
#
# Key Features:
#   - Visible (and, for clicks, enabled) precondition before acting
#   - Probing visibility checks that never raise
#   - Non-waiting counts and text collection for lists of items
#   - Indexed access with explicit out-of-range errors
#   - Allure step integration and Loguru logging
#
# Navigation side effects (click, select_option) are not awaited here;
# callers wait for the next expected state themselves.
#
# ================================================================================

from typing import Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from .locators import ElementLocator, resolve_locator
from .sync_engine import (
    WaitCondition,
    WaitConfig,
    WaitPolicy,
    WaitResult,
    element_condition,
    element_enabled,
    probe,
    wait_until,
)


class ElementIndexOutOfRangeError(IndexError):
    """Requested the Nth element of a collection with fewer than N+1 members."""

    def __init__(self, target: ElementLocator, index: int, count: int):
        self.target = target
        self.index = index
        self.count = count
        super().__init__(
            f"Index {index} is out of range for '{target.label}' ({count} element(s) present)"
        )


class ElementActions:
    """
    Element interaction façade over a Playwright page.

    Example:
        actions = ElementActions(page, WaitPolicy())
        await actions.fill(ElementLocator.css('[data-test="username"]'), "standard_user")
        await actions.click(ElementLocator.css('[data-test="login-button"]'))
    """

    def __init__(self, page: Page, waits: Optional[WaitPolicy] = None):
        """
        Initialize ElementActions with a Playwright page.

        Args:
            page: Playwright Page object
            waits: Page and probe wait budgets
        """
        self.page = page
        self.waits = waits or WaitPolicy()

    def resolve(self, target: ElementLocator) -> Locator:
        return resolve_locator(self.page, target)

    async def wait_for(
        self,
        target: ElementLocator,
        condition: WaitCondition = WaitCondition.VISIBLE,
        config: Optional[WaitConfig] = None,
    ) -> WaitResult:
        """
        Block until `target` reaches `condition`.

        Raises:
            WaitTimeoutError: if the budget (page profile by default) runs out
        """
        locator = self.resolve(target)
        with allure.step(f"Wait for {target.label} to be {condition.value}"):
            return await wait_until(
                element_condition(locator, condition),
                f"'{target.label}' {condition.value}",
                config or self.waits.page,
            )

    async def _visible(self, target: ElementLocator, config: Optional[WaitConfig]) -> Locator:
        locator = self.resolve(target)
        await wait_until(
            element_condition(locator, WaitCondition.VISIBLE),
            f"'{target.label}' visible",
            config or self.waits.page,
        )
        return locator.first

    @allure.step("Click: {target}")
    async def click(self, target: ElementLocator, config: Optional[WaitConfig] = None) -> None:
        """Click the first match once it is visible and enabled."""
        element = await self._visible(target, config)
        await wait_until(
            element_enabled(element),
            f"'{target.label}' enabled",
            config or self.waits.page,
        )
        logger.info(f"Clicking: {target.label}")
        await element.click()

    @allure.step("Fill: {target}")
    async def fill(self, target: ElementLocator, text: str, config: Optional[WaitConfig] = None) -> None:
        """Replace the input's value with exactly `text`."""
        element = await self._visible(target, config)
        shown = "*" * len(text) if "password" in target.label.lower() else text
        logger.info(f"Filling {target.label} with '{shown[:50]}'")
        await element.fill(text)

    @allure.step("Get text: {target}")
    async def get_text(self, target: ElementLocator, config: Optional[WaitConfig] = None) -> str:
        """Trimmed text content of the first visible match."""
        element = await self._visible(target, config)
        text = (await element.text_content() or "").strip()
        logger.debug(f"Got text from {target.label}: '{text}'")
        return text

    async def input_value(self, target: ElementLocator, config: Optional[WaitConfig] = None) -> str:
        element = await self._visible(target, config)
        return await element.input_value()

    @allure.step("Select option {value}: {target}")
    async def select_option(
        self,
        target: ElementLocator,
        value: str,
        config: Optional[WaitConfig] = None,
    ) -> None:
        """Select a dropdown option by value."""
        element = await self._visible(target, config)
        logger.info(f"Selecting '{value}' in {target.label}")
        await element.select_option(value)

    async def is_visible(self, target: ElementLocator, config: Optional[WaitConfig] = None) -> bool:
        """
        Probe whether `target` is visible within the short probe budget.

        Never raises for missing elements; repeated calls are independent.
        """
        locator = self.resolve(target)
        return await probe(
            element_condition(locator, WaitCondition.VISIBLE),
            f"'{target.label}' visible",
            config or self.waits.probe,
        )

    async def count(self, target: ElementLocator) -> int:
        """Number of matches right now (no waiting)."""
        return await self.resolve(target).count()

    async def get_all_texts(self, target: ElementLocator) -> List[str]:
        """Trimmed text of every current match (no waiting)."""
        texts = await self.resolve(target).all_text_contents()
        return [t.strip() for t in texts]

    async def nth(self, target: ElementLocator, index: int) -> Locator:
        """
        The element at `index` among current matches.

        Raises:
            ElementIndexOutOfRangeError: if fewer than index+1 matches exist
        """
        locator = self.resolve(target)
        count = await locator.count()
        if index < 0 or index >= count:
            raise ElementIndexOutOfRangeError(target, index, count)
        return locator.nth(index)

    async def get_child_texts(
        self,
        container: ElementLocator,
        index: int,
        children: Dict[str, ElementLocator],
    ) -> Dict[str, str]:
        """
        Read several child texts from the Nth container match.

        Child locators must be CSS and are scoped to that container.
        """
        item = await self.nth(container, index)
        result: Dict[str, str] = {}
        for field_name, child in children.items():
            text = await item.locator(child.selector).first.text_content()
            result[field_name] = (text or "").strip()
        return result


__all__ = [
    "ElementActions",
    "ElementIndexOutOfRangeError",
]
