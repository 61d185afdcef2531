"""
Fixtures for browser-free tests.

Page models run against the in-memory storefront in fake_storefront.py
with short wait budgets so negative probes return quickly.
"""

import pytest

from fake_storefront import BASE_URL, FakePage, FakeStorefront

from storefront_suites.common.config_loader import ConfigLoader
from storefront_suites.ui_testing.framework.browser_manager import BrowserSession
from storefront_suites.ui_testing.framework.sync_engine import WaitConfig, WaitPolicy
from storefront_suites.ui_testing.pages import (
    CartPage,
    CheckoutCompletePage,
    CheckoutInformationPage,
    CheckoutOverviewPage,
    LoginPage,
    ProductDetailPage,
    ProductsPage,
)


FAST_WAITS = WaitPolicy(
    page=WaitConfig(timeout=1.0, poll_interval=0.001),
    probe=WaitConfig(timeout=0.02, poll_interval=0.001),
)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Isolate the ConfigLoader singleton between tests."""
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def storefront() -> FakeStorefront:
    return FakeStorefront()


@pytest.fixture
def fake_page(storefront: FakeStorefront) -> FakePage:
    return FakePage(storefront)


@pytest.fixture
def session(fake_page: FakePage) -> BrowserSession:
    return BrowserSession(page=fake_page, base_url=BASE_URL, waits=FAST_WAITS)


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
async def logged_in(login_page: LoginPage, products_page: ProductsPage) -> ProductsPage:
    await login_page.open()
    await login_page.login("standard_user", "secret_sauce")
    await products_page.wait_until_loaded()
    return products_page
