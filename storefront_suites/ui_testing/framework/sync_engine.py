# ================================================================================
# Synchronization Engine
# ================================================================================
#
# Bounded polling waits for asynchronously rendered page state.
#
# Key Features:
#   - Clock-based deadline with a fixed poll interval
#   - Immediate return on the first satisfied evaluation
#   - Distinguishable timeout outcome (WaitTimeoutError) for blocking waits
#   - Probing checks that map a timeout to False
#   - Element state predicates (visible / hidden / attached / detached)
#   - Injectable clock and sleep for deterministic tests
#
# Usage:
#   await wait_until(lambda: header.is_visible(), "confirmation header")
#   shown = await probe(element_condition(badge, WaitCondition.VISIBLE), "badge",
#                       config=WAIT_PROFILES["probe"])
#
# ================================================================================

import asyncio
import inspect
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from loguru import logger
from playwright.async_api import Locator

from storefront_suites.common.config_loader import ConfigLoader, WaitSettings


Predicate = Callable[[], Union[bool, Awaitable[bool]]]


class WaitCondition(str, Enum):
    """Element or page states a wait can target."""
    VISIBLE = "visible"
    HIDDEN = "hidden"
    ATTACHED = "attached"
    DETACHED = "detached"
    CUSTOM = "custom"


class WaitOutcome(str, Enum):
    """Terminal result of a polling wait."""
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class WaitConfig:
    """
    Time budget for a single wait.

    Attributes:
        timeout: Total budget in seconds
        poll_interval: Delay between evaluations in seconds
    """
    timeout: float = 30.0
    poll_interval: float = 0.1


# Pre-configured budgets
WAIT_PROFILES: Dict[str, WaitConfig] = {
    # Blocking waits for page-level state (title, header, navigation result)
    "page": WaitConfig(timeout=30.0, poll_interval=0.1),
    # Existence probes that answer "is it there?" without failing
    "probe": WaitConfig(timeout=5.0, poll_interval=0.1),
}


@dataclass(frozen=True)
class WaitPolicy:
    """Wait budgets carried by a browser session."""
    page: WaitConfig = WAIT_PROFILES["page"]
    probe: WaitConfig = WAIT_PROFILES["probe"]

    @classmethod
    def from_settings(cls, settings: WaitSettings) -> "WaitPolicy":
        return cls(
            page=WaitConfig(timeout=settings.page_timeout, poll_interval=settings.poll_interval),
            probe=WaitConfig(timeout=settings.probe_timeout, poll_interval=settings.poll_interval),
        )

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "WaitPolicy":
        """Budgets from the `waits` section."""
        return cls.from_settings((config or ConfigLoader()).wait_settings())


@dataclass
class WaitResult:
    """Outcome of a polling wait."""
    outcome: WaitOutcome
    description: str
    elapsed: float
    attempts: int
    last_error: Optional[str] = None

    @property
    def satisfied(self) -> bool:
        return self.outcome is WaitOutcome.SATISFIED


class WaitTimeoutError(Exception):
    """Raised when a blocking wait exceeds its time budget."""

    def __init__(
        self,
        description: str,
        elapsed: float,
        timeout: float,
        last_error: Optional[str] = None,
    ):
        self.description = description
        self.elapsed = elapsed
        self.timeout = timeout
        self.last_error = last_error
        message = f"Timed out after {elapsed:.2f}s (budget {timeout:.2f}s) waiting for: {description}"
        if last_error:
            message += f". Last error: {last_error}"
        super().__init__(message)


async def _evaluate(predicate: Predicate) -> bool:
    result = predicate()
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def poll(
    predicate: Predicate,
    description: str = "condition",
    config: Optional[WaitConfig] = None,
    *,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> WaitResult:
    """
    Evaluate `predicate` until it is true or the time budget runs out.

    The predicate is evaluated at least once, so a zero timeout still
    answers "is it true right now?". A predicate that raises counts as
    not satisfied; the error text is kept on the result.

    Args:
        predicate: Sync or async callable returning a truthy value
        description: Human-readable condition name for logs and errors
        config: Time budget (defaults to the "page" profile)
        timeout: Overrides config.timeout
        poll_interval: Overrides config.poll_interval
        clock: Monotonic clock in seconds
        sleep: Awaitable sleep used between evaluations

    Returns:
        WaitResult with SATISFIED or TIMED_OUT outcome (never raises on timeout)
    """
    config = config or WAIT_PROFILES["page"]
    budget = config.timeout if timeout is None else timeout
    interval = config.poll_interval if poll_interval is None else poll_interval

    start = clock()
    attempts = 0
    last_error: Optional[str] = None

    while True:
        attempts += 1
        try:
            if await _evaluate(predicate):
                elapsed = clock() - start
                logger.debug(
                    f"Satisfied after {attempts} attempt(s) ({elapsed:.2f}s): {description}"
                )
                return WaitResult(WaitOutcome.SATISFIED, description, elapsed, attempts, last_error)
        except Exception as e:
            last_error = f"{type(e).__name__}: {e}"
            logger.warning(f"Attempt {attempts} for '{description}' raised {last_error}")

        elapsed = clock() - start
        remaining = budget - elapsed
        if remaining <= 0:
            return WaitResult(WaitOutcome.TIMED_OUT, description, elapsed, attempts, last_error)

        await sleep(min(interval, remaining))


async def wait_until(
    predicate: Predicate,
    description: str = "condition",
    config: Optional[WaitConfig] = None,
    **kwargs: Any,
) -> WaitResult:
    """
    Blocking wait: return once satisfied, raise WaitTimeoutError otherwise.

    Accepts the same keyword arguments as `poll`.
    """
    result = await poll(predicate, description, config, **kwargs)
    if not result.satisfied:
        budget = kwargs.get("timeout")
        if budget is None:
            budget = (config or WAIT_PROFILES["page"]).timeout
        logger.error(f"Timeout after {result.elapsed:.2f}s waiting for: {description}")
        raise WaitTimeoutError(description, result.elapsed, budget, result.last_error)
    return result


async def probe(
    predicate: Predicate,
    description: str = "condition",
    config: Optional[WaitConfig] = None,
    **kwargs: Any,
) -> bool:
    """
    Probing check: True if satisfied within the budget, False on timeout.

    Defaults to the short "probe" profile.
    """
    result = await poll(predicate, description, config or WAIT_PROFILES["probe"], **kwargs)
    if not result.satisfied:
        logger.debug(f"Probe negative after {result.elapsed:.2f}s: {description}")
    return result.satisfied


def element_condition(locator: Locator, condition: WaitCondition) -> Predicate:
    """
    Build a predicate that checks `locator` against `condition` once.

    Visibility is judged on the first match; Playwright's visibility checks
    do not wait, so each evaluation reflects the document at that instant.
    """
    if condition is WaitCondition.VISIBLE:
        async def check() -> bool:
            return await locator.first.is_visible()
    elif condition is WaitCondition.HIDDEN:
        async def check() -> bool:
            return not await locator.first.is_visible()
    elif condition is WaitCondition.ATTACHED:
        async def check() -> bool:
            return await locator.count() > 0
    elif condition is WaitCondition.DETACHED:
        async def check() -> bool:
            return await locator.count() == 0
    else:
        raise ValueError(
            f"No built-in predicate for {condition.value}; pass a callable to poll() instead"
        )
    return check


def element_enabled(locator: Locator) -> Predicate:
    """Predicate: first match is enabled."""
    async def check() -> bool:
        return await locator.first.is_enabled()
    return check


__all__ = [
    "Predicate",
    "WAIT_PROFILES",
    "WaitCondition",
    "WaitConfig",
    "WaitOutcome",
    "WaitPolicy",
    "WaitResult",
    "WaitTimeoutError",
    "element_condition",
    "element_enabled",
    "poll",
    "probe",
    "wait_until",
]
