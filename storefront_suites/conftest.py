"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the project-wide markers and tags tests by the directory they
live in (ui_testing -> ui, unit -> unit).

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating a full purchase"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: Live browser tests against the storefront"
    )
    config.addinivalue_line(
        "markers", "unit: Browser-free tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to login and logout"
    )
    config.addinivalue_line(
        "markers", "products: Tests related to the product list and detail pages"
    )
    config.addinivalue_line(
        "markers", "cart: Tests related to the shopping cart"
    )
    config.addinivalue_line(
        "markers", "checkout: Tests related to the checkout steps and pricing"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-add 'ui' / 'unit' markers from the test's location."""
    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        elif "unit" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Storefront E2E Verification Suite",
        "=" * 60,
        "",
    ]
