"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for live UI tests, providing fixtures for
browser management, page objects, and test setup/teardown.

Key Features:
- One browser and one isolated context per test (parallel-safe under -n)
- Page Object fixtures sharing an explicit BrowserSession
- Screenshot capture on failure
- Skipped unless --run-ui or RUN_UI_TESTS=1

================================================================================
"""

import os
from typing import AsyncGenerator

import allure
import pytest
from loguru import logger

from storefront_suites.common.config_loader import ConfigLoader
from storefront_suites.ui_testing.framework.browser_manager import BrowserManager, BrowserSession
from storefront_suites.ui_testing.framework.data_loader import FixtureData
from storefront_suites.ui_testing.framework.pricing import CartState
from storefront_suites.ui_testing.pages import (
    CartPage,
    CheckoutCompletePage,
    CheckoutInformationPage,
    CheckoutOverviewPage,
    LoginPage,
    ProductDetailPage,
    ProductsPage,
)


def _live_ui_enabled(config) -> bool:
    if config.getoption("--run-ui"):
        return True
    return os.getenv("RUN_UI_TESTS", "").lower() in ("1", "true", "yes")


@pytest.fixture(autouse=True)
def _require_live_ui(request) -> None:
    """Live browser tests hit the public storefront; run them only on request."""
    if not _live_ui_enabled(request.config):
        pytest.skip("live UI tests disabled (use --run-ui or RUN_UI_TESTS=1)")


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def fixture_data() -> FixtureData:
    """Users, products and checkout data from ui_testing/data."""
    return FixtureData()


@pytest.fixture
async def browser_manager(request) -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager fixture.

    Each test gets its own browser on its own event loop, so tests never
    share page state.
    """
    manager = BrowserManager.from_config(
        ConfigLoader(),
        browser_type=request.config.getoption("--browser"),
        headless=False if request.config.getoption("--headed") else None,
    )
    async with manager:
        yield manager


@pytest.fixture
async def session(request, browser_manager: BrowserManager) -> AsyncGenerator[BrowserSession, None]:
    """
    Browsing session handed to every Page Object of the test.

    Attaches a screenshot and the current URL when the test body fails.
    """
    browser_session = await browser_manager.new_session()
    yield browser_session

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        try:
            png = await browser_session.page.screenshot(full_page=True)
            allure.attach(png, name="failure_screenshot", attachment_type=allure.attachment_type.PNG)
            allure.attach(
                browser_session.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )
        except Exception as e:
            # Log but don't fail if screenshot capture fails
            logger.warning(f"Failed to capture screenshot on failure: {e}")


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(session: BrowserSession) -> LoginPage:
    return LoginPage(session)


@pytest.fixture
def products_page(session: BrowserSession) -> ProductsPage:
    return ProductsPage(session)


@pytest.fixture
def product_detail_page(session: BrowserSession) -> ProductDetailPage:
    return ProductDetailPage(session)


@pytest.fixture
def cart_page(session: BrowserSession) -> CartPage:
    return CartPage(session)


@pytest.fixture
def checkout_info_page(session: BrowserSession) -> CheckoutInformationPage:
    return CheckoutInformationPage(session)


@pytest.fixture
def checkout_overview_page(session: BrowserSession) -> CheckoutOverviewPage:
    return CheckoutOverviewPage(session)


@pytest.fixture
def checkout_complete_page(session: BrowserSession) -> CheckoutCompletePage:
    return CheckoutCompletePage(session)


@pytest.fixture
def cart_state() -> CartState:
    """Expected cart contents, kept in step with UI actions by the test."""
    return CartState()


# ================================================================================
# Authentication Fixtures
# ================================================================================

@pytest.fixture
async def logged_in(
    login_page: LoginPage,
    products_page: ProductsPage,
    fixture_data: FixtureData,
) -> ProductsPage:
    """
    Provides ProductsPage after logging in as the standard user.
    """
    user = fixture_data.standard_user()
    await login_page.open()
    await login_page.login(user.username, user.password)
    await products_page.wait_until_loaded()
    return products_page


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item.

    The `session` fixture reads `rep_call` during teardown to decide
    whether to attach a failure screenshot.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
