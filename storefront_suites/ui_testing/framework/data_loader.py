"""
================================================================================
Fixture Data Loader
================================================================================

Loads the JSON fixture files under ui_testing/data into the framework's
data models.

Files:
- users.json     valid_users / invalid_users
- products.json  products / sort_options
- checkout.json  checkout_info (valid, invalid) / payment_info / order_complete

================================================================================
"""

import json
import random
import string
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .models import CheckoutInfo, Product, SortOption, User
from .pricing import to_tax_rate


DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"
RANDOM_ALPHABET = string.ascii_letters + string.digits


class DataFileError(Exception):
    """A fixture file is missing, unreadable or lacks a required key."""
    pass


# ================================================================================
# Data Models
# ================================================================================

@dataclass(frozen=True)
class PaymentInfo:
    """Payment section of checkout.json."""
    tax_rate: Decimal
    payment_method: str = ""
    shipping_method: str = ""


@dataclass(frozen=True)
class OrderComplete:
    """Messages on the order confirmation screen."""
    header: str
    text: str


# ================================================================================
# Loader
# ================================================================================

class FixtureData:
    """
    Typed access to the fixture files.

    Each file is read once per instance.

    Example:
        data = FixtureData()
        backpack = data.product_by_id(4)
        user = data.user("standard_user")
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load(self, name: str) -> Dict[str, Any]:
        """
        Load `<name>.json` from the data directory.

        Raises:
            DataFileError: if the file is missing or not a JSON object
        """
        if name in self._cache:
            return self._cache[name]

        path = self.data_dir / f"{name}.json"
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise DataFileError(f"Fixture file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise DataFileError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise DataFileError(f"{path} must contain a JSON object")

        logger.debug(f"Loaded fixture data: {path.name}")
        self._cache[name] = data
        return data

    def _section(self, name: str, *keys: str) -> Any:
        value: Any = self.load(name)
        for key in keys:
            if not isinstance(value, dict) or key not in value:
                raise DataFileError(f"{name}.json has no '{'.'.join(keys)}'")
            value = value[key]
        return value

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def valid_users(self) -> List[User]:
        return [User.from_dict(u) for u in self._section("users", "valid_users")]

    def invalid_users(self) -> List[User]:
        return [User.from_dict(u) for u in self._section("users", "invalid_users")]

    def user(self, username: str) -> User:
        for user in self.valid_users() + self.invalid_users():
            if user.username == username:
                return user
        raise DataFileError(f"No user '{username}' in users.json")

    def standard_user(self) -> User:
        return self.user("standard_user")

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def products(self) -> List[Product]:
        try:
            return [Product.from_dict(p) for p in self._section("products", "products")]
        except (KeyError, TypeError, ValueError) as e:
            raise DataFileError(f"Invalid product entry in products.json: {e}") from e

    def product_by_id(self, product_id: int) -> Product:
        for product in self.products():
            if product.id == product_id:
                return product
        raise DataFileError(f"No product with id {product_id} in products.json")

    def product_by_name(self, name: str) -> Product:
        for product in self.products():
            if product.name == name:
                return product
        raise DataFileError(f"No product named '{name}' in products.json")

    def random_products(self, count: int = 2, rng: Optional[random.Random] = None) -> List[Product]:
        """Distinct products in random order."""
        return (rng or random).sample(self.products(), count)

    @staticmethod
    def random_string(length: int = 10, rng: Optional[random.Random] = None) -> str:
        """Alphanumeric string for throwaway form input."""
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")
        return "".join((rng or random).choice(RANDOM_ALPHABET) for _ in range(length))

    @classmethod
    def random_email(cls, rng: Optional[random.Random] = None) -> str:
        return f"{cls.random_string(8, rng)}@{cls.random_string(5, rng)}.com"

    def random_checkout_info(self, rng: Optional[random.Random] = None) -> CheckoutInfo:
        """Complete checkout details with random names and a 5-digit postal code."""
        rng = rng or random.Random()
        return CheckoutInfo(
            first_name=self.random_string(8, rng).capitalize(),
            last_name=self.random_string(10, rng).capitalize(),
            postal_code="".join(rng.choice(string.digits) for _ in range(5)),
        )

    def sort_options(self) -> List[SortOption]:
        return [SortOption.from_dict(o) for o in self._section("products", "sort_options")]

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    def valid_checkout_info(self) -> CheckoutInfo:
        return CheckoutInfo.from_dict(self._section("checkout", "checkout_info", "valid"))

    def invalid_checkout_info(self) -> List[CheckoutInfo]:
        return [
            CheckoutInfo.from_dict(c)
            for c in self._section("checkout", "checkout_info", "invalid")
        ]

    def payment_info(self) -> PaymentInfo:
        section = self._section("checkout", "payment_info")
        try:
            rate = to_tax_rate(section["tax_rate"])
        except (KeyError, ValueError) as e:
            raise DataFileError(f"Invalid payment_info.tax_rate in checkout.json: {e}") from e
        return PaymentInfo(
            tax_rate=rate,
            payment_method=section.get("payment_method", ""),
            shipping_method=section.get("shipping_method", ""),
        )

    def tax_rate(self) -> Decimal:
        return self.payment_info().tax_rate

    def order_complete(self) -> OrderComplete:
        section = self._section("checkout", "order_complete")
        return OrderComplete(header=section.get("header", ""), text=section.get("text", ""))


__all__ = [
    "DataFileError",
    "FixtureData",
    "OrderComplete",
    "PaymentInfo",
    "DEFAULT_DATA_DIR",
]
