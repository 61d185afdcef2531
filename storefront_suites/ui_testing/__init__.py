"""UI automation for the storefront: framework, page objects and scenarios."""
