"""
================================================================================
Pricing & Cart State Consistency
================================================================================

Browser-independent computation of the values the checkout overview must
display, and an expected-cart model scenarios keep in step with UI actions.

Rounding rules (two decimals, half-up):
    subtotal = round2(sum(prices))
    tax      = round2(subtotal * tax_rate)
    total    = round2(subtotal + tax)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from storefront_suites.common.config_loader import ConfigLoader

from .assertions import Mismatch, raise_mismatches
from .models import CartLine, Product


TWO_PLACES = Decimal("0.01")

_AMOUNT = re.compile(r"^\d+(\.\d{1,2})?$")

TaxRate = Union[Decimal, str, float, int]


def configured_tax_rate() -> Decimal:
    """`pricing.tax_rate` from configuration."""
    return ConfigLoader().pricing_settings().tax_rate


def configured_currency_symbol() -> str:
    """`pricing.currency_symbol` from configuration."""
    return ConfigLoader().pricing_settings().currency_symbol


class MalformedPriceError(ValueError):
    """A displayed price string could not be parsed."""

    def __init__(self, text: str, reason: str = "not a non-negative amount with at most 2 decimals"):
        self.text = text
        super().__init__(f"Malformed price {text!r}: {reason}")


def round2(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_price(text: str) -> Decimal:
    """
    Parse a display price such as "$29.99".

    One leading currency symbol is allowed; the remainder must be a
    non-negative decimal with at most two fractional digits.

    Raises:
        MalformedPriceError: for anything else, carrying the original text
    """
    if not isinstance(text, str):
        raise MalformedPriceError(repr(text), "expected a string")

    amount = text.strip()
    if amount and unicodedata.category(amount[0]) == "Sc":
        amount = amount[1:]

    if not _AMOUNT.match(amount):
        raise MalformedPriceError(text)

    try:
        return Decimal(amount)
    except InvalidOperation as e:
        raise MalformedPriceError(text) from e


def parse_labelled_price(text: str) -> Decimal:
    """
    Parse a summary label such as "Item total: $29.99" or "Tax: $2.40".

    Everything up to the last colon is treated as the label.
    """
    _, sep, value = (text or "").rpartition(":")
    if not sep:
        raise MalformedPriceError(text, "missing 'label:' prefix")
    return parse_price(value)


def format_price(amount: Decimal, symbol: Optional[str] = None) -> str:
    """Format an amount the way the storefront displays it (configured symbol by default)."""
    if symbol is None:
        symbol = configured_currency_symbol()
    return f"{symbol}{round2(amount)}"


def to_tax_rate(rate: TaxRate) -> Decimal:
    """Normalize a tax rate to Decimal (floats go through str to avoid binary noise)."""
    if isinstance(rate, Decimal):
        value = rate
    else:
        try:
            value = Decimal(str(rate))
        except InvalidOperation as e:
            raise ValueError(f"Invalid tax rate: {rate!r}") from e
    if not value.is_finite():
        raise ValueError(f"Tax rate must be a finite number, got {rate!r}")
    if value < 0:
        raise ValueError(f"Tax rate must be non-negative, got {rate!r}")
    return value


@dataclass(frozen=True)
class PriceSummary:
    """Subtotal, tax and total of a cart, all rounded to cents."""
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal

    COMPARED_FIELDS = ("subtotal", "tax", "total")

    def mismatches(self, observed: "PriceSummary") -> List[Mismatch]:
        """Fields whose observed value differs, compared exactly."""
        return [
            Mismatch(name, getattr(self, name), getattr(observed, name))
            for name in self.COMPARED_FIELDS
            if getattr(self, name) != getattr(observed, name)
        ]

    def verify_against(self, observed: "PriceSummary") -> None:
        """
        Compare with values read from the page.

        Raises:
            AssertionMismatch: naming every differing field
        """
        raise_mismatches(self.mismatches(observed), context="Price summary")
        logger.info(
            f"Price summary verified: subtotal={self.subtotal} tax={self.tax} total={self.total}"
        )

    def display(self, symbol: Optional[str] = None) -> Dict[str, str]:
        if symbol is None:
            symbol = configured_currency_symbol()
        return {name: format_price(getattr(self, name), symbol) for name in self.COMPARED_FIELDS}


def compute_summary(prices: Iterable[str], tax_rate: Optional[TaxRate] = None) -> PriceSummary:
    """
    Derive the expected summary for a list of display prices.

    Without `tax_rate` the configured `pricing.tax_rate` applies.

    >>> s = compute_summary(["$10.00", "$20.00", "$5.50"], "0.08")
    >>> (s.subtotal, s.tax, s.total)
    (Decimal('35.50'), Decimal('2.84'), Decimal('38.34'))
    """
    rate = to_tax_rate(configured_tax_rate() if tax_rate is None else tax_rate)
    subtotal = round2(sum((parse_price(p) for p in prices), Decimal("0")))
    tax = round2(subtotal * rate)
    total = round2(subtotal + tax)
    return PriceSummary(subtotal=subtotal, tax_rate=rate, tax=tax, total=total)


class CartState:
    """
    Expected contents of the cart, updated by the scenario next to each
    UI action and compared against what the pages show.
    """

    def __init__(self, products: Sequence[Product] = ()):
        self._lines: Dict[int, CartLine] = {}
        for product in products:
            self.add(product)

    def add(self, product: Product) -> None:
        if product.id in self._lines:
            raise ValueError(
                f"'{product.name}' is already in the cart; quantities cannot exceed 1"
            )
        self._lines[product.id] = CartLine(product)

    def remove(self, product: Product) -> None:
        if self._lines.pop(product.id, None) is None:
            raise ValueError(f"'{product.name}' is not in the cart")

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product: object) -> bool:
        return isinstance(product, Product) and product.id in self._lines

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def products(self) -> List[Product]:
        return [line.product for line in self._lines.values()]

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.products]

    @property
    def prices(self) -> List[str]:
        return [p.price for p in self.products]

    @property
    def badge_count(self) -> Optional[int]:
        """Number the cart badge should show; None when the badge is absent."""
        return len(self._lines) or None

    def summary(self, tax_rate: Optional[TaxRate] = None) -> PriceSummary:
        return compute_summary(self.prices, tax_rate)

    def verify_badge(self, observed: Optional[int]) -> None:
        if observed != self.badge_count:
            raise_mismatches([Mismatch("cart_badge", self.badge_count, observed)], context="Cart")

    def verify_names(self, observed: Iterable[str]) -> None:
        """Order-insensitive comparison with item names read from a page."""
        expected = sorted(self.names)
        actual = sorted(observed)
        if expected != actual:
            raise_mismatches([Mismatch("cart_items", expected, actual)], context="Cart")

    def verify_quantities(self, observed: Iterable[int]) -> None:
        """Every listed line must show quantity 1."""
        mismatches = [
            Mismatch(f"quantity[{i}]", 1, quantity)
            for i, quantity in enumerate(observed)
            if quantity != 1
        ]
        raise_mismatches(mismatches, context="Cart")


__all__ = [
    "CartState",
    "MalformedPriceError",
    "PriceSummary",
    "compute_summary",
    "configured_currency_symbol",
    "configured_tax_rate",
    "format_price",
    "parse_labelled_price",
    "parse_price",
    "round2",
    "to_tax_rate",
]
