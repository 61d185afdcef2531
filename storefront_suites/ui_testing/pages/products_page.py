"""
================================================================================
Products Page Object (Async / Playwright)
================================================================================

Inventory list shown after a successful login.

Per-product buttons are addressed by the key derived from the product's
display name (see `derive_key`), e.g. `add-to-cart-sauce-labs-backpack`.

================================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Union

import allure
from loguru import logger

from storefront_suites.ui_testing.framework.locators import ElementLocator, derive_key
from storefront_suites.ui_testing.framework.models import Product
from storefront_suites.ui_testing.framework.page_base import BasePage
from storefront_suites.ui_testing.framework.pricing import parse_price
from storefront_suites.ui_testing.framework.sync_engine import WaitCondition, wait_until


ProductRef = Union[Product, str]

SORT_VALUES = ("az", "za", "lohi", "hilo")

ITEM_FIELDS = {
    "name": ElementLocator.css('[data-test="inventory-item-name"]', "Item name"),
    "description": ElementLocator.css('[data-test="inventory-item-desc"]', "Item description"),
    "price": ElementLocator.css('[data-test="inventory-item-price"]', "Item price"),
}


def product_key(product: ProductRef) -> str:
    return product.key if isinstance(product, Product) else derive_key(product)


def product_name(product: ProductRef) -> str:
    return product.name if isinstance(product, Product) else product


class ProductsPage(BasePage):
    """Product list page object (async)."""

    URL_PATH = "/inventory.html"
    SCREEN = "Products page"
    LOADED_TEXT = "Products"

    LOCATORS = {
        "inventory_container": ElementLocator.css('[data-test="inventory-container"]', "Inventory list"),
        "inventory_item": ElementLocator.css('[data-test="inventory-item"]', "Inventory item"),
        "item_name": ITEM_FIELDS["name"],
        "item_price": ITEM_FIELDS["price"],
        "sort_dropdown": ElementLocator.css('[data-test="product-sort-container"]', "Sort dropdown"),
        "active_sort": ElementLocator.css('[data-test="active-option"]', "Active sort option"),
        "add_button": ElementLocator.css('[data-test="add-to-cart-{key}"]', "Add to cart: {name}"),
        "remove_button": ElementLocator.css('[data-test="remove-{key}"]', "Remove: {name}"),
        "item_title_link": ElementLocator.css('[data-test="item-{product_id}-title-link"]', "Product link: {name}"),
        "footer": ElementLocator.css('[data-test="footer-copy"]', "Footer"),
    }

    @allure.step("Open products page")
    async def open(self) -> "ProductsPage":
        await self.navigate()
        await self.wait_until_loaded()
        return self

    # =========================================================================
    # Listing
    # =========================================================================

    async def get_product_count(self) -> int:
        return await self.count("inventory_item")

    async def get_all_product_names(self) -> List[str]:
        return await self.get_all_texts("item_name")

    async def get_all_product_prices(self) -> List[Decimal]:
        return [parse_price(p) for p in await self.get_all_texts("item_price")]

    async def get_product_details(self, index: int) -> Dict[str, str]:
        """
        Name, description and price of the Nth listed product.

        Raises:
            ElementIndexOutOfRangeError: if fewer than index+1 products are listed
        """
        return await self.actions.get_child_texts(self.locate("inventory_item"), index, ITEM_FIELDS)

    async def get_products_sorted_by_price(self) -> List[Dict[str, object]]:
        """All listed products as {name, price}, cheapest first."""
        names = await self.get_all_product_names()
        prices = await self.get_all_product_prices()
        rows = [{"name": n, "price": p} for n, p in zip(names, prices)]
        return sorted(rows, key=lambda row: row["price"])

    # =========================================================================
    # Cart actions
    # =========================================================================

    @allure.step("Add to cart: {product}")
    async def add_to_cart(self, product: ProductRef) -> None:
        """Click the product's add button and wait for it to become 'Remove'."""
        key, name = product_key(product), product_name(product)
        await self.click("add_button", key=key, name=name)
        await self.wait_for("remove_button", key=key, name=name)
        logger.info(f"Added to cart: {name}")

    @allure.step("Remove from cart: {product}")
    async def remove_from_cart(self, product: ProductRef) -> None:
        key, name = product_key(product), product_name(product)
        await self.click("remove_button", key=key, name=name)
        await self.wait_for("add_button", key=key, name=name)
        logger.info(f"Removed from cart: {name}")

    async def add_multiple_to_cart(self, products: Iterable[ProductRef]) -> None:
        for product in products:
            await self.add_to_cart(product)

    async def is_in_cart(self, product: ProductRef) -> bool:
        """True when the product's button currently reads 'Remove'."""
        return await self.is_visible("remove_button", key=product_key(product), name=product_name(product))

    # =========================================================================
    # Sorting
    # =========================================================================

    @allure.step("Sort products by {value}")
    async def sort_by(self, value: str) -> None:
        """
        Choose a sort option and wait for the list to re-render in that order.

        Args:
            value: One of 'az', 'za', 'lohi', 'hilo'
        """
        if value not in SORT_VALUES:
            raise ValueError(f"Unknown sort option: {value!r}")
        await self.actions.select_option(self.locate("sort_dropdown"), value)

        async def rendered() -> bool:
            if await self.get_current_sort_option() != value:
                return False
            return _is_ordered(
                value,
                await self.get_all_product_names(),
                await self.get_all_product_prices(),
            )

        await wait_until(rendered, f"products sorted by '{value}'", self.session.waits.page)

    async def get_current_sort_option(self) -> str:
        return await self.actions.input_value(self.locate("sort_dropdown"))

    async def get_active_sort_text(self) -> str:
        return await self.get_text("active_sort")

    # =========================================================================
    # Navigation
    # =========================================================================

    @allure.step("Open product: {product}")
    async def open_product(self, product: Product) -> None:
        """Click the product title; callers wait for ProductDetailPage."""
        await self.click("item_title_link", product_id=product.id, name=product.name)

    @allure.step("Verify products page elements")
    async def verify_page_elements(self) -> None:
        await self.verify_elements_visible("title", "inventory_container", "sort_dropdown", "cart_link")

    async def wait_for_product_list(self) -> None:
        await self.wait_for("inventory_item", WaitCondition.ATTACHED)


def _is_ordered(value: str, names: List[str], prices: List[Decimal]) -> bool:
    if value == "az":
        return names == sorted(names)
    if value == "za":
        return names == sorted(names, reverse=True)
    if value == "lohi":
        return prices == sorted(prices)
    if value == "hilo":
        return prices == sorted(prices, reverse=True)
    return False
