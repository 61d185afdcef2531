"""
================================================================================
Element Locators
================================================================================

Immutable element descriptors and their resolution against a live page.

Features:
    - ElementLocator value type (css / xpath / role+name / text)
    - Selector templates with `{placeholders}` filled per call
    - LocatorSource protocol implemented by every Page Object
    - Deterministic product-name -> element-key derivation

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Protocol

from loguru import logger
from playwright.async_api import Locator, Page


class LocatorKind(str, Enum):
    """Supported query strategies."""
    CSS = "css"
    XPATH = "xpath"
    ROLE = "role"
    TEXT = "text"


class UnknownLocatorError(KeyError):
    """Raised when a Page Object is asked for an element id it does not declare."""
    pass


@dataclass(frozen=True, repr=False)
class ElementLocator:
    """
    Opaque, immutable descriptor for zero or more elements on the page.

    Attributes:
        kind: Query strategy
        selector: CSS/XPath selector, ARIA role, or visible text
        name: Accessible name (role locators only)
        description: Human-readable name used in logs and Allure steps
    """
    kind: LocatorKind
    selector: str
    name: Optional[str] = None
    description: str = ""

    @classmethod
    def css(cls, selector: str, description: str = "") -> "ElementLocator":
        return cls(LocatorKind.CSS, selector, description=description)

    @classmethod
    def xpath(cls, selector: str, description: str = "") -> "ElementLocator":
        return cls(LocatorKind.XPATH, selector, description=description)

    @classmethod
    def role(cls, role: str, name: str, description: str = "") -> "ElementLocator":
        return cls(LocatorKind.ROLE, role, name=name, description=description)

    @classmethod
    def text(cls, text: str, description: str = "") -> "ElementLocator":
        return cls(LocatorKind.TEXT, text, description=description)

    @property
    def label(self) -> str:
        """Description if given, otherwise the raw query."""
        if self.description:
            return self.description
        if self.kind is LocatorKind.ROLE:
            return f"{self.selector}[name={self.name!r}]"
        return self.selector

    def format(self, **params: Any) -> "ElementLocator":
        """
        Fill `{placeholders}` in a template locator.

        Returns a new locator; the template itself is never modified.
        """
        if not params:
            return self
        return replace(
            self,
            selector=self.selector.format(**params),
            name=self.name.format(**params) if self.name else self.name,
            description=self.description.format(**params),
        )

    def __repr__(self) -> str:
        return self.label

    __str__ = __repr__


class LocatorSource(Protocol):
    """Anything that maps a semantic element id to an ElementLocator."""

    def locate(self, element_id: str, **params: Any) -> ElementLocator:
        ...


def resolve_locator(page: Page, locator: ElementLocator) -> Locator:
    """
    Turn an ElementLocator into a Playwright Locator on `page`.

    Playwright locators are lazy, so the query runs each time the returned
    object is evaluated.
    """
    if locator.kind is LocatorKind.CSS:
        resolved = page.locator(locator.selector)
    elif locator.kind is LocatorKind.XPATH:
        resolved = page.locator(f"xpath={locator.selector}")
    elif locator.kind is LocatorKind.ROLE:
        resolved = page.get_by_role(locator.selector, name=locator.name, exact=True)
    elif locator.kind is LocatorKind.TEXT:
        resolved = page.get_by_text(locator.selector, exact=True)
    else:
        raise ValueError(f"Unsupported locator kind: {locator.kind}")

    logger.debug(f"Resolved '{locator.label}' -> {locator.kind.value}:{locator.selector}")
    return resolved


_WHITESPACE = re.compile(r"\s+")
_PARENTHESES = re.compile(r"[()]")


def derive_key(display_name: str) -> str:
    """
    Derive the element key the storefront uses for a product's buttons.

    Lowercases the name, collapses each whitespace run to a single hyphen
    and removes parentheses. Other punctuation is kept as-is.

    >>> derive_key("Sauce Labs Backpack")
    'sauce-labs-backpack'
    >>> derive_key("Test.allTheThings() T-Shirt (Red)")
    'test.allthethings-t-shirt-red'
    """
    key = _WHITESPACE.sub("-", display_name.strip().lower())
    return _PARENTHESES.sub("", key)


__all__ = [
    "ElementLocator",
    "LocatorKind",
    "LocatorSource",
    "UnknownLocatorError",
    "derive_key",
    "resolve_locator",
]
