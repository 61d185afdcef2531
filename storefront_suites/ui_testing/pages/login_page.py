"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Login screen of the storefront.

Transitions:
    login(success) -> ProductsPage
    login(failure) -> stays on LoginPage with the error banner shown

================================================================================
"""

from __future__ import annotations

import os
from typing import Optional

import allure
from loguru import logger

from storefront_suites.ui_testing.framework.locators import ElementLocator
from storefront_suites.ui_testing.framework.page_base import BasePage
from storefront_suites.ui_testing.framework.sync_engine import WaitCondition


class LoginPage(BasePage):
    """Login page object (async)."""

    URL_PATH = "/"
    SCREEN = "Login page"
    LOADED_MARKER = "login_button"

    LOCATORS = {
        "logo": ElementLocator.css(".login_logo", "Login logo"),
        "username_input": ElementLocator.css('[data-test="username"]', "Username input"),
        "password_input": ElementLocator.css('[data-test="password"]', "Password input"),
        "login_button": ElementLocator.css('[data-test="login-button"]', "Login button"),
        "error_message": ElementLocator.css('[data-test="error"]', "Login error banner"),
        "error_close": ElementLocator.css('[data-test="error-button"]', "Close error button"),
        "credentials_hint": ElementLocator.css('[data-test="login-credentials"]', "Accepted usernames"),
        "password_hint": ElementLocator.css('[data-test="login-password"]', "Password hint"),
    }

    @allure.step("Open login page")
    async def open(self) -> "LoginPage":
        """Navigate to the login page and wait for the form."""
        await self.navigate()
        await self.wait_until_loaded()
        return self

    async def enter_username(self, username: str) -> None:
        await self.fill("username_input", username)

    async def enter_password(self, password: str) -> None:
        await self.fill("password_input", password)

    @allure.step("Login (username={username})")
    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Submit the login form.

        The resulting screen is not awaited: callers wait for ProductsPage
        (success) or the error banner (failure).

        Args:
            username: Defaults to `UI_USERNAME` env var (demo-safe).
            password: Defaults to `UI_PASSWORD` env var (demo-safe).
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "standard_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "secret_sauce")

        await self.enter_username(username)
        await self.enter_password(password)
        await self.click("login_button")
        logger.info(f"Submitted login for '{username}'")

    # =========================================================================
    # Error banner
    # =========================================================================

    async def is_error_displayed(self) -> bool:
        return await self.is_visible("error_message")

    async def get_error_message(self) -> str:
        return await self.get_text("error_message")

    @allure.step("Close login error")
    async def close_error(self) -> None:
        await self.click("error_close")
        await self.wait_for("error_message", WaitCondition.DETACHED)

    # =========================================================================
    # Fields
    # =========================================================================

    async def clear_all_fields(self) -> None:
        await self.fill("username_input", "")
        await self.fill("password_input", "")

    async def get_username_value(self) -> str:
        return await self.actions.input_value(self.locate("username_input"))

    async def get_password_value(self) -> str:
        return await self.actions.input_value(self.locate("password_input"))

    async def get_credentials_hint(self) -> str:
        return await self.get_text("credentials_hint")

    async def get_password_hint(self) -> str:
        return await self.get_text("password_hint")

    @allure.step("Verify login form is displayed")
    async def verify_form_displayed(self) -> None:
        await self.verify_elements_visible("logo", "username_input", "password_input", "login_button")
