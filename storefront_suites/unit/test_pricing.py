from decimal import Decimal

import pytest
import yaml

from storefront_suites.common.config_loader import ConfigLoader
from storefront_suites.ui_testing.framework.assertions import AssertionMismatch
from storefront_suites.ui_testing.framework.models import CartLine, Product
from storefront_suites.ui_testing.framework.pricing import (
    CartState,
    MalformedPriceError,
    PriceSummary,
    compute_summary,
    format_price,
    parse_labelled_price,
    parse_price,
    configured_currency_symbol,
    configured_tax_rate,
    round2,
    to_tax_rate,
)


BACKPACK = Product(id=4, name="Sauce Labs Backpack", description="", price="$29.99")
BIKE_LIGHT = Product(id=0, name="Sauce Labs Bike Light", description="", price="$9.99")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("$29.99", Decimal("29.99")),
        ("  $7.99 ", Decimal("7.99")),
        ("€15", Decimal("15")),
        ("£0.5", Decimal("0.5")),
        ("12.30", Decimal("12.30")),
    ],
)
def test_parse_price_accepts_display_prices(text, expected):
    assert parse_price(text) == expected


@pytest.mark.parametrize("text", ["", "$", "abc", "$-1.00", "$1.234", "$$5.00", "5,00", "$1e3"])
def test_parse_price_rejects_malformed_text(text):
    with pytest.raises(MalformedPriceError) as exc_info:
        parse_price(text)
    assert exc_info.value.text == text
    assert isinstance(exc_info.value, ValueError)


def test_parse_labelled_price():
    assert parse_labelled_price("Item total: $29.99") == Decimal("29.99")
    assert parse_labelled_price("Tax: $2.40") == Decimal("2.40")

    with pytest.raises(MalformedPriceError):
        parse_labelled_price("$2.40")


def test_round2_is_half_up():
    assert round2(Decimal("2.845")) == Decimal("2.85")
    assert round2(Decimal("2.844")) == Decimal("2.84")
    assert round2(Decimal("0.005")) == Decimal("0.01")


def test_summary_for_several_items():
    summary = compute_summary(["$10.00", "$20.00", "$5.50"], "0.08")

    assert summary.subtotal == Decimal("35.50")
    assert summary.tax == Decimal("2.84")
    assert summary.total == Decimal("38.34")


def test_summary_for_single_backpack():
    summary = compute_summary(["$29.99"], Decimal("0.08"))

    assert (summary.subtotal, summary.tax, summary.total) == (
        Decimal("29.99"),
        Decimal("2.40"),
        Decimal("32.39"),
    )
    assert summary.display() == {"subtotal": "$29.99", "tax": "$2.40", "total": "$32.39"}


def test_summary_of_empty_cart_is_zero():
    summary = compute_summary([], "0.08")
    assert summary.total == Decimal("0.00")


def test_float_tax_rate_is_taken_at_face_value():
    assert to_tax_rate(0.08) == Decimal("0.08")
    with pytest.raises(ValueError):
        to_tax_rate("-0.1")
    with pytest.raises(ValueError):
        to_tax_rate("eight percent")


def test_verify_against_names_every_differing_field():
    expected = compute_summary(["$29.99"], "0.08")
    observed = PriceSummary(
        subtotal=Decimal("29.99"),
        tax_rate=Decimal("0.08"),
        tax=Decimal("2.39"),
        total=Decimal("32.38"),
    )

    with pytest.raises(AssertionMismatch) as exc_info:
        expected.verify_against(observed)

    assert exc_info.value.fields == ["tax", "total"]
    assert exc_info.value.as_dict()["tax"] == {"expected": Decimal("2.40"), "observed": Decimal("2.39")}
    assert "2.39" in str(exc_info.value)


def test_verify_against_passes_on_exact_match():
    expected = compute_summary(["$29.99", "$9.99"], "0.08")
    expected.verify_against(compute_summary(["$9.99", "$29.99"], "0.08"))


def test_format_price():
    assert format_price(Decimal("2.4")) == "$2.40"
    assert format_price(Decimal("32.385"), "€") == "€32.39"


def test_cart_state_badge_follows_contents():
    cart = CartState()
    assert cart.badge_count is None

    cart.add(BACKPACK)
    cart.add(BIKE_LIGHT)
    assert cart.badge_count == 2
    assert BACKPACK in cart

    cart.remove(BACKPACK)
    assert cart.badge_count == 1
    assert cart.names == ["Sauce Labs Bike Light"]

    cart.clear()
    assert cart.badge_count is None
    assert len(cart) == 0


def test_cart_state_rejects_duplicates_and_unknown_removals():
    cart = CartState([BACKPACK])

    with pytest.raises(ValueError):
        cart.add(BACKPACK)
    with pytest.raises(ValueError):
        cart.remove(BIKE_LIGHT)


def test_cart_state_verifications():
    cart = CartState([BACKPACK, BIKE_LIGHT])

    cart.verify_badge(2)
    cart.verify_names(["Sauce Labs Bike Light", "Sauce Labs Backpack"])
    cart.verify_quantities([1, 1])

    with pytest.raises(AssertionMismatch):
        cart.verify_badge(None)
    with pytest.raises(AssertionMismatch):
        cart.verify_names(["Sauce Labs Backpack"])
    with pytest.raises(AssertionMismatch) as exc_info:
        cart.verify_quantities([1, 2])
    assert exc_info.value.fields == ["quantity[1]"]


def test_cart_state_summary_uses_product_prices():
    cart = CartState([BACKPACK, BIKE_LIGHT])
    assert cart.summary("0.08").subtotal == Decimal("39.98")


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_cart_line_quantity_must_be_positive_int(quantity):
    with pytest.raises(ValueError):
        CartLine(BACKPACK, quantity)


@pytest.mark.parametrize("rate", ["NaN", "Infinity", "-Infinity", Decimal("NaN"), float("inf"), "sNaN"])
def test_non_finite_tax_rate_is_rejected(rate):
    with pytest.raises(ValueError, match="finite"):
        to_tax_rate(rate)


def test_summary_with_non_finite_rate_is_rejected():
    with pytest.raises(ValueError):
        compute_summary(["$29.99"], "Infinity")


def _pricing_config(tmp_path, **pricing):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"pricing": pricing}), encoding="utf-8")
    ConfigLoader.reset()
    return ConfigLoader(config_path=config_path)


def test_summary_defaults_to_configured_tax_rate(tmp_path, monkeypatch):
    monkeypatch.delenv("PRICING_TAX_RATE", raising=False)
    _pricing_config(tmp_path, tax_rate="0.10", currency_symbol="€")

    summary = CartState([BACKPACK]).summary()

    assert configured_tax_rate() == Decimal("0.10")
    assert (summary.tax_rate, summary.tax, summary.total) == (
        Decimal("0.10"), Decimal("3.00"), Decimal("32.99"),
    )
    assert summary.display() == {"subtotal": "€29.99", "tax": "€3.00", "total": "€32.99"}
    assert format_price(Decimal("1")) == "€1.00"
    assert format_price(Decimal("1"), "$") == "$1.00"


def test_configured_pricing_follows_environment(tmp_path, monkeypatch):
    _pricing_config(tmp_path, tax_rate="0.10")
    monkeypatch.setenv("PRICING_TAX_RATE", "0.08")
    monkeypatch.setenv("PRICING_CURRENCY_SYMBOL", "£")

    assert compute_summary(["$29.99"]).total == Decimal("32.39")
    assert configured_currency_symbol() == "£"


def test_explicit_rate_wins_over_configuration(tmp_path, monkeypatch):
    monkeypatch.delenv("PRICING_TAX_RATE", raising=False)
    _pricing_config(tmp_path, tax_rate="0.50")

    assert CartState([BACKPACK]).summary("0.08").tax == Decimal("2.40")
