"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the storefront screens.

Each page class encapsulates:
    - Element locators (LOCATORS table)
    - Page-specific domain actions
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import LoginPage
from .products_page import ProductsPage
from .product_detail_page import ProductDetailPage
from .cart_page import CartPage
from .checkout_page import (
    CheckoutCompletePage,
    CheckoutInformationPage,
    CheckoutOverviewPage,
    SubmitResult,
)

__all__ = [
    "LoginPage",
    "ProductsPage",
    "ProductDetailPage",
    "CartPage",
    "CheckoutInformationPage",
    "CheckoutOverviewPage",
    "CheckoutCompletePage",
    "SubmitResult",
]
