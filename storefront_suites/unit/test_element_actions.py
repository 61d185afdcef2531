import pytest
from loguru import logger

from fake_storefront import FakePage, FakeStorefront

from storefront_suites.ui_testing.framework.element_actions import (
    ElementActions,
    ElementIndexOutOfRangeError,
)
from storefront_suites.ui_testing.framework.locators import ElementLocator
from storefront_suites.ui_testing.framework.sync_engine import (
    WaitCondition,
    WaitConfig,
    WaitPolicy,
    WaitTimeoutError,
)


FAST = WaitPolicy(
    page=WaitConfig(timeout=0.2, poll_interval=0.001),
    probe=WaitConfig(timeout=0.02, poll_interval=0.001),
)

USERNAME = ElementLocator.css('[data-test="username"]', "Username input")
PASSWORD = ElementLocator.css('[data-test="password"]', "Password input")
LOGIN = ElementLocator.css('[data-test="login-button"]', "Login button")
ERROR = ElementLocator.css('[data-test="error"]', "Error banner")
ITEM = ElementLocator.css('[data-test="inventory-item"]', "Inventory item")
ITEM_NAME = ElementLocator.css('[data-test="inventory-item-name"]', "Item name")
ITEM_PRICE = ElementLocator.css('[data-test="inventory-item-price"]', "Item price")
SORT = ElementLocator.css('[data-test="product-sort-container"]', "Sort dropdown")


@pytest.fixture
def storefront():
    return FakeStorefront()


@pytest.fixture
def actions(storefront):
    return ElementActions(FakePage(storefront), FAST)


@pytest.fixture
def inventory(storefront, actions):
    storefront.logged_in = True
    storefront.go("inventory")
    return actions


@pytest.fixture
def captured_logs():
    messages = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{message}")
    yield messages
    logger.remove(sink_id)


async def test_fill_replaces_value(actions, storefront):
    await actions.fill(USERNAME, "first")
    await actions.fill(USERNAME, "standard_user")

    assert storefront.fields["username"] == "standard_user"
    assert await actions.input_value(USERNAME) == "standard_user"


async def test_fill_masks_passwords_in_logs(actions, captured_logs):
    await actions.fill(PASSWORD, "secret_sauce")

    assert not any("secret_sauce" in m for m in captured_logs)
    assert any("************" in m for m in captured_logs)


async def test_click_acts_once_visible(storefront):
    storefront.latency = 5
    storefront.go("login")
    actions = ElementActions(FakePage(storefront), FAST)

    await actions.click(LOGIN)

    assert storefront.clicks == ["login-button"]
    assert await actions.get_text(ERROR) == "Epic sadface: Username is required"


async def test_click_waits_for_enabled(actions, storefront):
    storefront.disabled.add("login-button")

    with pytest.raises(WaitTimeoutError) as exc_info:
        await actions.click(LOGIN)

    assert "enabled" in exc_info.value.description
    assert storefront.clicks == []


async def test_click_missing_element_times_out(actions):
    with pytest.raises(WaitTimeoutError) as exc_info:
        await actions.click(ElementLocator.css('[data-test="checkout"]', "Checkout"))

    assert exc_info.value.timeout == FAST.page.timeout
    assert "Checkout" in str(exc_info.value)


async def test_is_visible_is_a_side_effect_free_probe(actions, storefront):
    first = await actions.is_visible(ERROR)
    second = await actions.is_visible(ERROR)

    assert first is second is False
    assert storefront.clicks == []
    assert await actions.is_visible(LOGIN) is True


async def test_count_and_texts_do_not_wait(inventory):
    assert await inventory.count(ITEM) == 6
    assert await inventory.count(ERROR) == 0

    names = await inventory.get_all_texts(ITEM_NAME)
    assert names == sorted(names)
    assert "Sauce Labs Backpack" in names


async def test_get_text_reads_first_match(inventory):
    assert await inventory.get_text(ITEM_PRICE) == "$29.99"


async def test_nth_rejects_out_of_range(inventory):
    with pytest.raises(ElementIndexOutOfRangeError) as exc_info:
        await inventory.nth(ITEM, 6)

    assert exc_info.value.count == 6
    assert exc_info.value.index == 6
    assert isinstance(exc_info.value, IndexError)

    with pytest.raises(ElementIndexOutOfRangeError):
        await inventory.nth(ITEM, -1)


async def test_get_child_texts(inventory):
    details = await inventory.get_child_texts(ITEM, 1, {"name": ITEM_NAME, "price": ITEM_PRICE})

    assert details == {"name": "Sauce Labs Bike Light", "price": "$9.99"}


async def test_select_option(inventory, storefront):
    await inventory.select_option(SORT, "hilo")

    assert storefront.sort == "hilo"
    assert await inventory.input_value(SORT) == "hilo"
    assert await inventory.get_text(ITEM_PRICE) == "$49.99"


async def test_wait_for_conditions(actions, storefront):
    await actions.wait_for(LOGIN)
    await actions.wait_for(ERROR, WaitCondition.DETACHED)

    storefront.error = "Epic sadface: Password is required"
    result = await actions.wait_for(ERROR, WaitCondition.ATTACHED)
    assert result.satisfied

    with pytest.raises(WaitTimeoutError):
        await actions.wait_for(ERROR, WaitCondition.HIDDEN, WaitConfig(0.01, 0.001))
