"""
================================================================================
Checkout Page Objects (Async / Playwright)
================================================================================

The three checkout steps:

    CheckoutInformationPage  /checkout-step-one.html   customer details
    CheckoutOverviewPage     /checkout-step-two.html   items and price summary
    CheckoutCompletePage     /checkout-complete.html   confirmation

Submitting invalid customer details keeps the browser on step one with an
error banner. submit_information() reports that as a result rather than an
exception so scenarios can assert on it.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import allure
from loguru import logger

from storefront_suites.ui_testing.framework.assertions import Mismatch, raise_mismatches
from storefront_suites.ui_testing.framework.data_loader import OrderComplete
from storefront_suites.ui_testing.framework.locators import ElementLocator
from storefront_suites.ui_testing.framework.models import CheckoutInfo
from storefront_suites.ui_testing.framework.page_base import COMMON_LOCATORS, BasePage
from storefront_suites.ui_testing.framework.pricing import (
    CartState,
    PriceSummary,
    TaxRate,
    parse_labelled_price,
    to_tax_rate,
)
from storefront_suites.ui_testing.framework.sync_engine import WaitCondition, wait_until


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of submitting the customer information form."""
    advanced: bool
    error_message: Optional[str] = None


# =============================================================================
# Step one: customer information
# =============================================================================

class CheckoutInformationPage(BasePage):
    """Checkout: Your Information."""

    URL_PATH = "/checkout-step-one.html"
    SCREEN = "Checkout information page"
    LOADED_TEXT = "Checkout: Your Information"

    LOCATORS = {
        "first_name": ElementLocator.css('[data-test="firstName"]', "First name input"),
        "last_name": ElementLocator.css('[data-test="lastName"]', "Last name input"),
        "postal_code": ElementLocator.css('[data-test="postalCode"]', "Postal code input"),
        "continue_button": ElementLocator.css('[data-test="continue"]', "Continue"),
        "cancel_button": ElementLocator.css('[data-test="cancel"]', "Cancel"),
        "error_message": ElementLocator.css('[data-test="error"]', "Checkout error banner"),
        "error_close": ElementLocator.css('[data-test="error-button"]', "Close error button"),
    }

    @allure.step("Fill checkout information")
    async def fill_information(self, info: CheckoutInfo) -> None:
        await self.fill("first_name", info.first_name)
        await self.fill("last_name", info.last_name)
        await self.fill("postal_code", info.postal_code)

    @allure.step("Continue to overview")
    async def continue_to_overview(self) -> None:
        await self.click("continue_button")

    async def submit_information(self, info: CheckoutInfo) -> SubmitResult:
        """
        Fill the form, press Continue and report where the browser ended up.

        A banner left by an earlier attempt is closed first, so only a banner
        raised by this submit can settle the wait. Then waits for either the
        overview title or the error banner, whichever appears first.

        Returns:
            SubmitResult(advanced=True) on the overview,
            SubmitResult(advanced=False, error_message=...) when the form stayed

        Raises:
            WaitTimeoutError: if neither state appears within the page budget
        """
        if await self.count("error_message"):
            logger.debug("Closing error banner from a previous submit")
            await self.close_error()

        await self.fill_information(info)
        await self.continue_to_overview()

        title = self.actions.resolve(COMMON_LOCATORS["title"]).first
        error = self.actions.resolve(self.locate("error_message")).first

        async def on_overview() -> bool:
            if not await title.is_visible():
                return False
            return (await title.text_content() or "").strip() == CheckoutOverviewPage.LOADED_TEXT

        async def settled() -> bool:
            return await on_overview() or await error.is_visible()

        with allure.step("Wait for overview or error banner"):
            await wait_until(settled, "checkout overview or error banner", self.session.waits.page)

        if await on_overview():
            logger.info("Checkout information accepted")
            return SubmitResult(advanced=True)

        message = await self.get_error_message()
        logger.info(f"Checkout information rejected: {message}")
        return SubmitResult(advanced=False, error_message=message)

    async def is_error_displayed(self) -> bool:
        return await self.is_visible("error_message")

    async def get_error_message(self) -> str:
        return await self.get_text("error_message")

    @allure.step("Close checkout error")
    async def close_error(self) -> None:
        await self.click("error_close")
        await self.wait_for("error_message", WaitCondition.DETACHED)

    @allure.step("Cancel checkout")
    async def cancel(self) -> None:
        await self.click("cancel_button")

    @allure.step("Verify checkout information page elements")
    async def verify_page_elements(self) -> None:
        await self.verify_elements_visible(
            "first_name", "last_name", "postal_code", "continue_button", "cancel_button"
        )


# =============================================================================
# Step two: overview
# =============================================================================

class CheckoutOverviewPage(BasePage):
    """Checkout: Overview."""

    URL_PATH = "/checkout-step-two.html"
    SCREEN = "Checkout overview page"
    LOADED_TEXT = "Checkout: Overview"

    LOCATORS = {
        "cart_item": ElementLocator.css('[data-test="inventory-item"]', "Overview item"),
        "item_name": ElementLocator.css('[data-test="inventory-item-name"]', "Overview item name"),
        "payment_info": ElementLocator.css('[data-test="payment-info-value"]', "Payment information"),
        "shipping_info": ElementLocator.css('[data-test="shipping-info-value"]', "Shipping information"),
        "subtotal_label": ElementLocator.css('[data-test="subtotal-label"]', "Item total"),
        "tax_label": ElementLocator.css('[data-test="tax-label"]', "Tax"),
        "total_label": ElementLocator.css('[data-test="total-label"]', "Total"),
        "finish_button": ElementLocator.css('[data-test="finish"]', "Finish"),
        "cancel_button": ElementLocator.css('[data-test="cancel"]', "Cancel"),
    }

    async def get_item_count(self) -> int:
        return await self.count("cart_item")

    async def get_all_item_names(self) -> List[str]:
        return await self.get_all_texts("item_name")

    async def get_subtotal(self) -> Decimal:
        return parse_labelled_price(await self.get_text("subtotal_label"))

    async def get_tax(self) -> Decimal:
        return parse_labelled_price(await self.get_text("tax_label"))

    async def get_total(self) -> Decimal:
        return parse_labelled_price(await self.get_text("total_label"))

    async def get_payment_information(self) -> str:
        return await self.get_text("payment_info")

    async def get_shipping_information(self) -> str:
        return await self.get_text("shipping_info")

    async def get_price_summary(self, tax_rate: TaxRate) -> PriceSummary:
        """Summary as displayed; `tax_rate` is carried along for reporting only."""
        return PriceSummary(
            subtotal=await self.get_subtotal(),
            tax_rate=to_tax_rate(tax_rate),
            tax=await self.get_tax(),
            total=await self.get_total(),
        )

    @allure.step("Verify price summary")
    async def verify_price_summary(self, expected: PriceSummary) -> PriceSummary:
        """
        Compare displayed subtotal, tax and total with `expected`.

        Raises:
            AssertionMismatch: naming every differing field
        """
        observed = await self.get_price_summary(expected.tax_rate)
        allure.attach(
            "\n".join(f"{k}: {v}" for k, v in expected.display().items()),
            name="Expected price summary",
            attachment_type=allure.attachment_type.TEXT,
        )
        expected.verify_against(observed)
        return observed

    @allure.step("Verify overview against cart")
    async def verify_cart(self, cart: CartState, tax_rate: TaxRate) -> PriceSummary:
        """Check listed items and the price summary derived from `cart`."""
        cart.verify_names(await self.get_all_item_names())
        return await self.verify_price_summary(cart.summary(tax_rate))

    @allure.step("Finish checkout")
    async def finish(self) -> None:
        await self.click("finish_button")

    @allure.step("Cancel checkout from overview")
    async def cancel(self) -> None:
        await self.click("cancel_button")

    @allure.step("Verify checkout overview page elements")
    async def verify_page_elements(self) -> None:
        await self.verify_elements_visible(
            "payment_info", "shipping_info", "subtotal_label", "tax_label",
            "total_label", "finish_button", "cancel_button",
        )


# =============================================================================
# Step three: complete
# =============================================================================

class CheckoutCompletePage(BasePage):
    """Checkout: Complete!"""

    URL_PATH = "/checkout-complete.html"
    SCREEN = "Checkout complete page"
    LOADED_MARKER = "complete_header"

    LOCATORS = {
        "complete_header": ElementLocator.css('[data-test="complete-header"]', "Complete header"),
        "complete_text": ElementLocator.css('[data-test="complete-text"]', "Complete message"),
        "pony_express": ElementLocator.css('[data-test="pony-express"]', "Pony express image"),
        "back_button": ElementLocator.css('[data-test="back-to-products"]', "Back home"),
    }

    async def get_header_text(self) -> str:
        return await self.get_text("complete_header")

    async def get_message_text(self) -> str:
        return await self.get_text("complete_text")

    async def is_pony_express_visible(self) -> bool:
        return await self.is_visible("pony_express")

    @allure.step("Verify order complete messages")
    async def verify_order_complete(self, expected: OrderComplete) -> None:
        observed = OrderComplete(
            header=await self.get_header_text(),
            text=await self.get_message_text(),
        )
        raise_mismatches(
            [
                Mismatch(name, getattr(expected, name), getattr(observed, name))
                for name in ("header", "text")
                if getattr(expected, name) != getattr(observed, name)
            ],
            context=self.SCREEN,
        )

    @allure.step("Back to products")
    async def back_to_products(self) -> None:
        await self.click("back_button")
