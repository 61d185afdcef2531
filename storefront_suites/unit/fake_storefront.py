"""
In-memory storefront used by the unit tests.

`FakeStorefront` keeps the application state (screen, cart, form fields,
errors) and renders it as a small element tree on every query.
`FakePage` / `FakeLocator` expose the subset of the Playwright async API the
framework calls, so page models can be exercised without a browser.

Selectors understood: `[data-test="..."]`, `#id`, `.class`.

`latency` makes each navigation render an empty document for that many
queries first, which forces callers through the polling path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional, Set, Tuple

from storefront_suites.ui_testing.framework.data_loader import FixtureData
from storefront_suites.ui_testing.framework.models import Product


BASE_URL = "https://fake.storefront.test"

PASSWORD = "secret_sauce"
ACCEPTED_USERS = ("standard_user", "problem_user", "performance_glitch_user")
LOCKED_OUT_USERS = ("locked_out_user",)

PATHS = {
    "login": "/",
    "inventory": "/inventory.html",
    "detail": "/inventory-item.html",
    "cart": "/cart.html",
    "step_one": "/checkout-step-one.html",
    "step_two": "/checkout-step-two.html",
    "complete": "/checkout-complete.html",
}

TITLES = {
    "inventory": "Products",
    "cart": "Your Cart",
    "step_one": "Checkout: Your Information",
    "step_two": "Checkout: Overview",
    "complete": "Checkout: Complete!",
}

SORT_TEXT = {
    "az": "Name (A to Z)",
    "za": "Name (Z to A)",
    "lohi": "Price (low to high)",
    "hilo": "Price (high to low)",
}

_DATA_TEST = re.compile(r'^\[data-test="([^"]+)"\]$')


class FakeElementMissing(Exception):
    """Element query that Playwright would keep waiting on."""


class FakeStrictModeViolation(Exception):
    """Single-element operation on a locator matching several elements."""


@dataclass
class FakeElement:
    test_id: str = ""
    element_id: str = ""
    classes: Tuple[str, ...] = ()
    text: str = ""
    value: Optional[str] = None
    visible: bool = True
    enabled: bool = True
    on_click: Optional[Callable[[], None]] = None
    on_fill: Optional[Callable[[str], None]] = None
    children: List["FakeElement"] = field(default_factory=list)

    def matches(self, selector: str) -> bool:
        m = _DATA_TEST.match(selector)
        if m:
            return self.test_id == m.group(1)
        if selector.startswith("#"):
            return self.element_id == selector[1:]
        if selector.startswith("."):
            return selector[1:] in self.classes
        raise ValueError(f"Fake storefront does not understand selector {selector!r}")

    def descendants(self):
        for child in self.children:
            yield child
            yield from child.descendants()

    def full_text(self) -> str:
        return self.text + "".join(c.full_text() for c in self.children)


def _price(value: str) -> Decimal:
    return Decimal(value.lstrip("$"))


def _money(value: Decimal) -> str:
    return f"${value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


class FakeStorefront:
    """Application state plus rendering."""

    def __init__(
        self,
        products: Optional[List[Product]] = None,
        tax_rate: Decimal = Decimal("0.08"),
        latency: int = 0,
    ):
        self.products = list(products) if products is not None else FixtureData().products()
        self.tax_rate = tax_rate
        self.latency = latency
        self.tax_skew = Decimal("0")

        self.screen = "login"
        self.logged_in = False
        self.cart: List[int] = []
        self.sort = "az"
        self.menu_open = False
        self.detail_id: Optional[int] = None
        self.fields: Dict[str, str] = {}
        self.error: Optional[str] = None
        self.clicks: List[str] = []
        self.disabled: Set[str] = set()
        self._pending = 0

    # -- state transitions --------------------------------------------------

    def go(self, screen: str) -> None:
        self.screen = screen
        self.error = None
        self.menu_open = False
        self._pending = self.latency
        for name in ("firstName", "lastName", "postalCode"):
            self.fields.pop(name, None)

    def product(self, product_id: int) -> Product:
        return next(p for p in self.products if p.id == product_id)

    def _login(self) -> None:
        username = self.fields.get("username", "")
        password = self.fields.get("password", "")
        if not username:
            self.error = "Epic sadface: Username is required"
        elif not password:
            self.error = "Epic sadface: Password is required"
        elif username in LOCKED_OUT_USERS and password == PASSWORD:
            self.error = "Epic sadface: Sorry, this user has been locked out."
        elif username in ACCEPTED_USERS and password == PASSWORD:
            self.logged_in = True
            self.fields.clear()
            self.go("inventory")
        else:
            self.error = "Epic sadface: Username and password do not match any user in this service"

    def _logout(self) -> None:
        self.logged_in = False
        self.fields.clear()
        self.go("login")

    def _toggle(self, product_id: int) -> None:
        if product_id in self.cart:
            self.cart.remove(product_id)
        else:
            self.cart.append(product_id)

    def _continue(self) -> None:
        for name, label in (("firstName", "First Name"), ("lastName", "Last Name"), ("postalCode", "Postal Code")):
            if not self.fields.get(name):
                self.error = f"Error: {label} is required"
                return
        self.go("step_two")

    def _finish(self) -> None:
        self.cart.clear()
        self.go("complete")

    def _reset(self) -> None:
        self.cart.clear()
        self.sort = "az"

    def _set(self, name: str) -> Callable[[str], None]:
        def setter(value: str) -> None:
            self.fields[name] = value
        return setter

    def summary(self) -> Tuple[Decimal, Decimal, Decimal]:
        subtotal = sum((_price(self.product(i).price) for i in self.cart), Decimal("0"))
        tax = (subtotal * self.tax_rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) + self.tax_skew
        return subtotal, tax, subtotal + tax

    # -- rendering ----------------------------------------------------------

    def render(self) -> FakeElement:
        root = FakeElement()
        if self._pending > 0:
            self._pending -= 1
            return root
        if self.screen == "login":
            root.children = self._login_screen()
        else:
            root.children = self._header() + getattr(self, f"_{self.screen}_screen")()
        return root

    def _button(self, test_id: str, action: Callable[[], None], text: str = "") -> FakeElement:
        def click() -> None:
            self.clicks.append(test_id)
            action()
        return FakeElement(
            test_id=test_id,
            text=text or test_id,
            enabled=test_id not in self.disabled,
            on_click=click,
        )

    def _input(self, test_id: str) -> FakeElement:
        return FakeElement(test_id=test_id, value=self.fields.get(test_id, ""), on_fill=self._set(test_id))

    def _error(self) -> List[FakeElement]:
        if not self.error:
            return []
        return [
            FakeElement(test_id="error", text=self.error),
            self._button("error-button", lambda: setattr(self, "error", None)),
        ]

    def _login_screen(self) -> List[FakeElement]:
        return [
            FakeElement(classes=("login_logo",), text="Swag Labs"),
            self._input("username"),
            self._input("password"),
            self._button("login-button", self._login, "Login"),
            FakeElement(
                test_id="login-credentials",
                text="Accepted usernames are:" + "".join(ACCEPTED_USERS + LOCKED_OUT_USERS),
            ),
            FakeElement(test_id="login-password", text=f"Password for all users:{PASSWORD}"),
        ] + self._error()

    def _header(self) -> List[FakeElement]:
        elements = [
            self._button("shopping-cart-link", lambda: self.go("cart"), ""),
            FakeElement(element_id="react-burger-menu-btn", on_click=lambda: setattr(self, "menu_open", True)),
            FakeElement(element_id="react-burger-cross-btn", visible=self.menu_open,
                        on_click=lambda: setattr(self, "menu_open", False)),
            self._button("inventory-sidebar-link", lambda: self.go("inventory"), "All Items"),
            self._button("logout-sidebar-link", self._logout, "Logout"),
            self._button("reset-sidebar-link", self._reset, "Reset App State"),
        ]
        for element in elements[3:]:
            element.visible = self.menu_open
        if self.cart:
            elements.append(FakeElement(test_id="shopping-cart-badge", text=str(len(self.cart))))
        if self.screen in TITLES:
            elements.append(FakeElement(test_id="title", text=TITLES[self.screen]))
        return elements

    def _item(self, product: Product, buttons: bool = True, quantity: bool = False) -> FakeElement:
        children = [
            FakeElement(test_id="inventory-item-name", text=product.name),
            FakeElement(test_id="inventory-item-desc", text=product.description),
            FakeElement(test_id="inventory-item-price", text=product.price),
        ]
        if quantity:
            children.insert(0, FakeElement(test_id="item-quantity", text="1"))
        if buttons:
            key = product.key
            pid = product.id
            if pid in self.cart:
                children.append(self._button(f"remove-{key}", lambda: self._toggle(pid), "Remove"))
            elif not quantity:
                children.append(self._button(f"add-to-cart-{key}", lambda: self._toggle(pid), "Add to cart"))
            children.append(self._button(f"item-{pid}-title-link", lambda: self._open_detail(pid), ""))
        return FakeElement(test_id="inventory-item", classes=("inventory_item",), children=children)

    def _open_detail(self, product_id: int) -> None:
        self.detail_id = product_id
        self.go("detail")

    def _sorted(self) -> List[Product]:
        if self.sort == "az":
            return sorted(self.products, key=lambda p: p.name)
        if self.sort == "za":
            return sorted(self.products, key=lambda p: p.name, reverse=True)
        if self.sort == "lohi":
            return sorted(self.products, key=lambda p: _price(p.price))
        return sorted(self.products, key=lambda p: _price(p.price), reverse=True)

    def _select_sort(self, value: str) -> None:
        self.sort = value

    def _inventory_screen(self) -> List[FakeElement]:
        items = [self._item(p) for p in self._sorted()]
        return [
            FakeElement(test_id="product-sort-container", value=self.sort, on_fill=self._select_sort),
            FakeElement(test_id="active-option", text=SORT_TEXT[self.sort]),
            FakeElement(test_id="inventory-container", children=items),
            FakeElement(test_id="footer-copy", text="© Sauce Labs"),
        ]

    def _detail_screen(self) -> List[FakeElement]:
        product = self.product(self.detail_id)
        pid = product.id
        button = (
            self._button("remove", lambda: self._toggle(pid), "Remove")
            if pid in self.cart
            else self._button("add-to-cart", lambda: self._toggle(pid), "Add to cart")
        )
        return [
            FakeElement(test_id="inventory-item-name", text=product.name),
            FakeElement(test_id="inventory-item-desc", text=product.description),
            FakeElement(test_id="inventory-item-price", text=product.price),
            button,
            self._button("back-to-products", lambda: self.go("inventory"), "Back to products"),
        ]

    def _cart_screen(self) -> List[FakeElement]:
        return [
            FakeElement(test_id="cart-quantity-label", text="QTY"),
            FakeElement(test_id="cart-desc-label", text="Description"),
            FakeElement(
                test_id="cart-list",
                children=[self._item(self.product(i), quantity=True) for i in self.cart],
            ),
            self._button("continue-shopping", lambda: self.go("inventory"), "Continue Shopping"),
            self._button("checkout", lambda: self.go("step_one"), "Checkout"),
        ]

    def _step_one_screen(self) -> List[FakeElement]:
        return [
            self._input("firstName"),
            self._input("lastName"),
            self._input("postalCode"),
            self._button("continue", self._continue, "Continue"),
            self._button("cancel", lambda: self.go("cart"), "Cancel"),
        ] + self._error()

    def _step_two_screen(self) -> List[FakeElement]:
        subtotal, tax, total = self.summary()
        items = [self._item(self.product(i), buttons=False, quantity=True) for i in self.cart]
        return items + [
            FakeElement(test_id="payment-info-value", text="SauceCard #31337"),
            FakeElement(test_id="shipping-info-value", text="Free Pony Express Delivery!"),
            FakeElement(test_id="subtotal-label", text=f"Item total: {_money(subtotal)}"),
            FakeElement(test_id="tax-label", text=f"Tax: {_money(tax)}"),
            FakeElement(test_id="total-label", text=f"Total: {_money(total)}"),
            self._button("finish", self._finish, "Finish"),
            self._button("cancel", lambda: self.go("inventory"), "Cancel"),
        ]

    def _complete_screen(self) -> List[FakeElement]:
        return [
            FakeElement(test_id="pony-express"),
            FakeElement(test_id="complete-header", text="Thank you for your order!"),
            FakeElement(
                test_id="complete-text",
                text="Your order has been dispatched, and will arrive just as fast as the pony can get there!",
            ),
            self._button("back-to-products", lambda: self.go("inventory"), "Back Home"),
        ]


class FakeLocator:
    """Lazy query: re-renders the storefront on every evaluation."""

    def __init__(
        self,
        page: "FakePage",
        selector: str,
        parent: Optional["FakeLocator"] = None,
        index: Optional[int] = None,
        text: Optional[str] = None,
    ):
        self._page = page
        self._selector = selector
        self._parent = parent
        self._index = index
        self._text = text

    def _scopes(self) -> List[FakeElement]:
        if self._parent is None:
            return [self._page.storefront.render()]
        return self._parent._all()

    def _all(self) -> List[FakeElement]:
        found: List[FakeElement] = []
        for scope in self._scopes():
            for element in scope.descendants():
                if self._text is not None:
                    if element.text == self._text:
                        found.append(element)
                elif element.matches(self._selector):
                    found.append(element)
        if self._index is None:
            return found
        index = self._index if self._index >= 0 else len(found) + self._index
        return [found[index]] if 0 <= index < len(found) else []

    def _one(self) -> FakeElement:
        found = self._all()
        if not found:
            raise FakeElementMissing(f"No element matches {self._selector!r}")
        if len(found) > 1:
            raise FakeStrictModeViolation(f"{self._selector!r} resolved to {len(found)} elements")
        return found[0]

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self._page, self._selector, self._parent, 0, self._text)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self._page, self._selector, self._parent, index, self._text)

    def locator(self, selector: str) -> "FakeLocator":
        return FakeLocator(self._page, selector, parent=self)

    async def count(self) -> int:
        return len(self._all())

    async def is_visible(self) -> bool:
        found = self._all()
        if len(found) > 1:
            raise FakeStrictModeViolation(f"{self._selector!r} resolved to {len(found)} elements")
        return bool(found) and found[0].visible

    async def is_enabled(self) -> bool:
        return self._one().enabled

    async def text_content(self) -> Optional[str]:
        return self._one().full_text()

    async def all_text_contents(self) -> List[str]:
        return [e.full_text() for e in self._all()]

    async def input_value(self) -> str:
        return self._one().value or ""

    async def click(self) -> None:
        element = self._one()
        if not element.visible or not element.enabled:
            raise FakeElementMissing(f"{self._selector!r} is not clickable")
        if element.on_click:
            element.on_click()

    async def fill(self, value: str) -> None:
        element = self._one()
        if element.on_fill is None:
            raise FakeElementMissing(f"{self._selector!r} is not an input")
        element.on_fill(value)

    async def select_option(self, value: str) -> List[str]:
        await self.fill(value)
        return [value]


class FakePage:
    """Subset of playwright.async_api.Page backed by a FakeStorefront."""

    def __init__(self, storefront: Optional[FakeStorefront] = None, base_url: str = BASE_URL):
        self.storefront = storefront or FakeStorefront()
        self.base_url = base_url
        self.visited: List[str] = []
        self.screenshots: List[str] = []

    @property
    def url(self) -> str:
        return f"{self.base_url}{PATHS[self.storefront.screen]}"

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_text(self, text: str, exact: bool = True) -> FakeLocator:
        return FakeLocator(self, "", text=text)

    async def goto(self, url: str, wait_until: str = "load") -> None:
        self.visited.append(url)
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        path = path.split("?")[0] or "/"
        screen = next((s for s, p in PATHS.items() if p == path), "login")
        if screen != "login" and not self.storefront.logged_in:
            screen = "login"
        if screen == "detail":
            query = url.partition("?id=")[2]
            self.storefront.detail_id = int(query) if query else self.storefront.products[0].id
        self.storefront.go(screen)

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        return None

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        png = b"\x89PNG\r\n\x1a\n"
        if path:
            with open(path, "wb") as f:
                f.write(png)
            self.screenshots.append(path)
        return png
