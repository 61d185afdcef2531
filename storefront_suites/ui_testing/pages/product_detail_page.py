"""
================================================================================
Product Detail Page Object (Async / Playwright)
================================================================================
"""

from __future__ import annotations

from decimal import Decimal

import allure

from storefront_suites.ui_testing.framework.assertions import Mismatch, raise_mismatches
from storefront_suites.ui_testing.framework.locators import ElementLocator
from storefront_suites.ui_testing.framework.models import Product
from storefront_suites.ui_testing.framework.page_base import BasePage
from storefront_suites.ui_testing.framework.pricing import parse_price


class ProductDetailPage(BasePage):
    """Single product view reached from the product list."""

    URL_PATH = "/inventory-item.html"
    SCREEN = "Product detail page"
    LOADED_MARKER = "back_button"

    LOCATORS = {
        "name": ElementLocator.css('[data-test="inventory-item-name"]', "Product name"),
        "description": ElementLocator.css('[data-test="inventory-item-desc"]', "Product description"),
        "price": ElementLocator.css('[data-test="inventory-item-price"]', "Product price"),
        "add_button": ElementLocator.css('[data-test="add-to-cart"]', "Add to cart"),
        "remove_button": ElementLocator.css('[data-test="remove"]', "Remove"),
        "back_button": ElementLocator.css('[data-test="back-to-products"]', "Back to products"),
    }

    async def open_for(self, product: Product) -> "ProductDetailPage":
        """Navigate straight to a product by id."""
        with allure.step(f"Open detail page of {product.name}"):
            await self.page.goto(f"{self.url}?id={product.id}")
            await self.wait_until_loaded()
        return self

    async def get_name(self) -> str:
        return await self.get_text("name")

    async def get_price(self) -> Decimal:
        return parse_price(await self.get_text("price"))

    @allure.step("Add to cart from detail page")
    async def add_to_cart(self) -> None:
        await self.click("add_button")
        await self.wait_for("remove_button")

    @allure.step("Remove from cart on detail page")
    async def remove_from_cart(self) -> None:
        await self.click("remove_button")
        await self.wait_for("add_button")

    @allure.step("Back to products")
    async def back_to_products(self) -> None:
        await self.click("back_button")

    @allure.step("Verify product details")
    async def verify_product(self, product: Product) -> None:
        """Compare the displayed name, description and price with fixture data."""
        observed = {
            "name": await self.get_name(),
            "description": await self.get_text("description"),
            "price": await self.get_price(),
        }
        expected = {
            "name": product.name,
            "description": product.description,
            "price": parse_price(product.price),
        }
        raise_mismatches(
            [Mismatch(k, expected[k], observed[k]) for k in expected if expected[k] != observed[k]],
            context=self.SCREEN,
        )
