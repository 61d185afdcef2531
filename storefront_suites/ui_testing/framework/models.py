"""
================================================================================
Storefront Data Models
================================================================================

Immutable reference data consumed by Page Objects and scenarios:
users, products, sort options and checkout information.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .locators import derive_key


@dataclass(frozen=True)
class User:
    """Login credentials plus the error the site shows for them, if any."""
    username: str
    password: str
    description: str = ""
    expected_error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            username=data.get("username", ""),
            password=data.get("password", ""),
            description=data.get("description", ""),
            expected_error=data.get("expectedError"),
        )


@dataclass(frozen=True)
class Product:
    """A catalogue entry. `price` is the display string, e.g. "$29.99"."""
    id: int
    name: str
    description: str
    price: str

    @property
    def key(self) -> str:
        """Element key used by the product's add/remove buttons."""
        return derive_key(self.name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            description=data.get("description", ""),
            price=data["price"],
        )


@dataclass(frozen=True)
class CartLine:
    """A product in the cart. Quantity is always 1 on this storefront."""
    product: Product
    quantity: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError(f"Cart quantity must be a positive integer, got {self.quantity!r}")


@dataclass(frozen=True)
class SortOption:
    """Product sort dropdown entry."""
    value: str
    text: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SortOption":
        return cls(value=data["value"], text=data["text"])


# Messages shown for the first empty required field, in priority order
CHECKOUT_REQUIRED_FIELDS = (
    ("first_name", "Error: First Name is required"),
    ("last_name", "Error: Last Name is required"),
    ("postal_code", "Error: Postal Code is required"),
)


@dataclass(frozen=True)
class CheckoutInfo:
    """Customer information entered on the first checkout step."""
    first_name: str
    last_name: str
    postal_code: str
    expected_error: Optional[str] = None

    @property
    def missing_field_error(self) -> Optional[str]:
        """
        Error the site shows for this input, or None if it is complete.

        Only the first missing field is reported:
        first name > last name > postal code.
        """
        for field_name, message in CHECKOUT_REQUIRED_FIELDS:
            if not getattr(self, field_name):
                return message
        return None

    @property
    def is_complete(self) -> bool:
        return self.missing_field_error is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckoutInfo":
        return cls(
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            postal_code=data.get("postalCode", ""),
            expected_error=data.get("expectedError"),
        )


__all__ = [
    "CHECKOUT_REQUIRED_FIELDS",
    "CartLine",
    "CheckoutInfo",
    "Product",
    "SortOption",
    "User",
]
