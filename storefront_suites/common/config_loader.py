"""
================================================================================
Configuration Loader
================================================================================

Storefront settings from config/config.yaml with environment overrides.

Every dotted key can be overridden by an environment variable named after it
(ui.base_url -> UI_BASE_URL, waits.page_timeout -> WAITS_PAGE_TIMEOUT).
Environment values are strings; they are coerced to the type of the default.

The three sections the framework runs on are exposed as typed settings:

    ui_settings()       browser, headless, viewport, storefront URL
    wait_settings()     page / probe budgets and poll interval
    pricing_settings()  tax rate (Decimal) and currency symbol

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Repository root /config/config.yaml
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
_TRUE_VALUES = ("true", "1", "yes", "on")
_MISSING = object()


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


# ================================================================================
# Typed Settings
# ================================================================================

@dataclass(frozen=True)
class UISettings:
    base_url: str = "https://www.saucedemo.com"
    browser: str = "chromium"
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


@dataclass(frozen=True)
class WaitSettings:
    """Seconds; page waits block, probe waits answer yes/no."""
    page_timeout: float = 30.0
    probe_timeout: float = 5.0
    poll_interval: float = 0.1


@dataclass(frozen=True)
class PricingSettings:
    tax_rate: Decimal = Decimal("0.08")
    currency_symbol: str = "$"


# ================================================================================
# Loader
# ================================================================================

class ConfigLoader:
    """
    Process-wide configuration.

    Lookup order: environment variable, YAML file, caller default.

    Usage:
        >>> config = ConfigLoader()
        >>> config.ui_settings().base_url
        'https://www.saucedemo.com'
        >>> config.pricing_settings().tax_rate
        Decimal('0.08')
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self._config_path}: {e}") from e

        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"{self._config_path} must contain a mapping at the top level")
        self._config = loaded or {}
        logger.debug(f"Loaded configuration from: {self._config_path}")

    @staticmethod
    def env_key(key: str) -> str:
        """Environment variable that overrides `key`."""
        return key.upper().replace(".", "_")

    def _lookup(self, key: str) -> Any:
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return _MISSING
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value for a dotted key such as "ui.base_url".

        Raises:
            ConfigurationError: if an environment value cannot take the
                type of `default`
        """
        env_name = self.env_key(key)
        raw = os.environ.get(env_name)
        if raw is not None:
            return self._coerce(env_name, raw, default)

        value = self._lookup(key)
        return default if value is _MISSING else value

    def get_section(self, section: str) -> Dict[str, Any]:
        value = self._config.get(section)
        return value if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Re-read the YAML file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    @staticmethod
    def _coerce(env_name: str, raw: str, reference: Any) -> Any:
        # bool first: bool is a subclass of int
        if isinstance(reference, bool):
            return raw.strip().lower() in _TRUE_VALUES
        for kind in (int, float):
            if isinstance(reference, kind):
                try:
                    return kind(raw)
                except ValueError as e:
                    raise ConfigurationError(
                        f"{env_name}={raw!r} is not a valid {kind.__name__}"
                    ) from e
        return raw

    # -------------------------------------------------------------------------
    # Typed sections
    # -------------------------------------------------------------------------

    def ui_settings(self) -> UISettings:
        """
        Raises:
            ConfigurationError: for an unsupported browser or a non-positive viewport
        """
        defaults = UISettings()
        settings = UISettings(
            base_url=str(self.get("ui.base_url", defaults.base_url)).rstrip("/"),
            browser=str(self.get("ui.browser", defaults.browser)).lower(),
            headless=bool(self.get("ui.headless", defaults.headless)),
            viewport_width=int(self.get("ui.viewport_width", defaults.viewport_width)),
            viewport_height=int(self.get("ui.viewport_height", defaults.viewport_height)),
        )
        if settings.browser not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"ui.browser must be one of {', '.join(SUPPORTED_BROWSERS)}, got {settings.browser!r}"
            )
        if settings.viewport_width <= 0 or settings.viewport_height <= 0:
            raise ConfigurationError(f"Viewport must be positive, got {settings.viewport}")
        return settings

    def wait_settings(self) -> WaitSettings:
        """
        Raises:
            ConfigurationError: if a timeout is negative or the poll interval is not positive
        """
        defaults = WaitSettings()
        settings = WaitSettings(
            page_timeout=float(self.get("waits.page_timeout", defaults.page_timeout)),
            probe_timeout=float(self.get("waits.probe_timeout", defaults.probe_timeout)),
            poll_interval=float(self.get("waits.poll_interval", defaults.poll_interval)),
        )
        if settings.page_timeout < 0 or settings.probe_timeout < 0:
            raise ConfigurationError(f"Wait timeouts must be non-negative: {settings}")
        if settings.poll_interval <= 0:
            raise ConfigurationError(f"waits.poll_interval must be positive, got {settings.poll_interval}")
        return settings

    def pricing_settings(self) -> PricingSettings:
        """
        Raises:
            ConfigurationError: if pricing.tax_rate is not a finite, non-negative number
        """
        defaults = PricingSettings()
        raw_rate = self.get("pricing.tax_rate", str(defaults.tax_rate))
        try:
            rate = Decimal(str(raw_rate))
        except InvalidOperation as e:
            raise ConfigurationError(f"pricing.tax_rate={raw_rate!r} is not a number") from e
        if not rate.is_finite() or rate < 0:
            raise ConfigurationError(f"pricing.tax_rate must be finite and non-negative, got {raw_rate!r}")
        return PricingSettings(
            tax_rate=rate,
            currency_symbol=str(self.get("pricing.currency_symbol", defaults.currency_symbol)),
        )

    @classmethod
    def reset(cls) -> None:
        """Drop the process-wide instance so the next ConfigLoader() reloads."""
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "PricingSettings",
    "SUPPORTED_BROWSERS",
    "UISettings",
    "WaitSettings",
]
