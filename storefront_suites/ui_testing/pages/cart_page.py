"""
================================================================================
Cart Page Object (Async / Playwright)
================================================================================

Transitions:
    remove_item      -> stays on CartPage, item list shrinks
    continue_shopping -> ProductsPage
    checkout         -> CheckoutInformationPage

================================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

import allure
from loguru import logger

from storefront_suites.ui_testing.framework.locators import ElementLocator
from storefront_suites.ui_testing.framework.page_base import BasePage
from storefront_suites.ui_testing.framework.pricing import CartState, parse_price
from storefront_suites.ui_testing.framework.sync_engine import wait_until

from .products_page import ProductRef, product_key, product_name


CART_ITEM_FIELDS = {
    "name": ElementLocator.css('[data-test="inventory-item-name"]', "Item name"),
    "description": ElementLocator.css('[data-test="inventory-item-desc"]', "Item description"),
    "price": ElementLocator.css('[data-test="inventory-item-price"]', "Item price"),
    "quantity": ElementLocator.css('[data-test="item-quantity"]', "Item quantity"),
}


class CartPage(BasePage):
    """Shopping cart page object (async)."""

    URL_PATH = "/cart.html"
    SCREEN = "Cart page"
    LOADED_TEXT = "Your Cart"

    LOCATORS = {
        "cart_item": ElementLocator.css('[data-test="inventory-item"]', "Cart item"),
        "item_name": CART_ITEM_FIELDS["name"],
        "item_price": CART_ITEM_FIELDS["price"],
        "item_quantity": CART_ITEM_FIELDS["quantity"],
        "quantity_label": ElementLocator.css('[data-test="cart-quantity-label"]', "QTY label"),
        "description_label": ElementLocator.css('[data-test="cart-desc-label"]', "Description label"),
        "remove_button": ElementLocator.css('[data-test="remove-{key}"]', "Remove: {name}"),
        "continue_shopping": ElementLocator.css('[data-test="continue-shopping"]', "Continue shopping"),
        "checkout_button": ElementLocator.css('[data-test="checkout"]', "Checkout"),
    }

    @allure.step("Open cart page")
    async def open(self) -> "CartPage":
        await self.navigate()
        await self.wait_until_loaded()
        return self

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_item_count(self) -> int:
        return await self.count("cart_item")

    async def is_empty(self) -> bool:
        return await self.get_item_count() == 0

    async def get_all_item_names(self) -> List[str]:
        return await self.get_all_texts("item_name")

    async def get_all_item_prices(self) -> List[Decimal]:
        return [parse_price(p) for p in await self.get_all_texts("item_price")]

    async def get_item_details(self, index: int) -> Dict[str, str]:
        """
        Name, description, price and quantity of the Nth cart line.

        Raises:
            ElementIndexOutOfRangeError: if the cart has fewer lines
        """
        return await self.actions.get_child_texts(self.locate("cart_item"), index, CART_ITEM_FIELDS)

    async def get_all_items_details(self) -> List[Dict[str, str]]:
        return [await self.get_item_details(i) for i in range(await self.get_item_count())]

    async def get_total_quantity(self) -> int:
        return sum(int(q) for q in await self.get_all_texts("item_quantity"))

    async def get_items_total(self) -> Decimal:
        return sum(await self.get_all_item_prices(), Decimal("0"))

    async def is_item_in_cart(self, name: str) -> bool:
        return name in await self.get_all_item_names()

    # =========================================================================
    # Actions
    # =========================================================================

    async def _wait_for_count(self, expected: int) -> None:
        async def settled() -> bool:
            return await self.get_item_count() == expected

        await wait_until(settled, f"cart holds {expected} item(s)", self.session.waits.page)

    @allure.step("Remove item: {product}")
    async def remove_item(self, product: ProductRef) -> None:
        """Remove one line and wait until the list has shrunk by one."""
        before = await self.get_item_count()
        await self.click("remove_button", key=product_key(product), name=product_name(product))
        await self._wait_for_count(before - 1)
        logger.info(f"Removed from cart: {product_name(product)}")

    @allure.step("Remove all items from cart")
    async def remove_all_items(self) -> None:
        for name in await self.get_all_item_names():
            await self.remove_item(name)

    @allure.step("Continue shopping")
    async def continue_shopping(self) -> None:
        await self.click("continue_shopping")

    @allure.step("Proceed to checkout")
    async def proceed_to_checkout(self) -> None:
        await self.click("checkout_button")

    # =========================================================================
    # Verification
    # =========================================================================

    @allure.step("Verify cart contents")
    async def verify_items(self, expected: CartState) -> None:
        """
        Compare the listed items and quantities with the expected cart.

        Raises:
            AssertionMismatch: if names differ or any quantity is not 1
        """
        expected.verify_names(await self.get_all_item_names())
        quantities = await self.get_all_texts("item_quantity")
        expected.verify_quantities(int(q) for q in quantities)

    @allure.step("Verify cart page elements")
    async def verify_page_elements(self) -> None:
        await self.verify_elements_visible(
            "title", "quantity_label", "description_label", "continue_shopping", "checkout_button"
        )

