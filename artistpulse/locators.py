"""Ordered fallback locators and the activation retry policy.

A ``LocatorChain`` lists alternative expressions for one logical element.
Resolution walks the chain in order and stops at the first match, so a
primary locator that still works costs a single query while a drifted
layout is covered by the entries behind it.

Locators are opaque to this module. Matching happens through a
``DocumentContext`` (the session driver in production, an in-memory fake in
tests), which is the only place that knows how an expression is evaluated.
"""

from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from artistpulse.logger import get_logger

log = get_logger(__name__)

INDEX_PLACEHOLDER = "{index}"


class Locator(BaseModel):
    """A single element-selection expression."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(min_length=1)

    @property
    def selector(self) -> str:
        """Expression in Playwright selector syntax.

        Absolute and parenthesized XPath is prefixed explicitly, since the
        selector engine only auto-detects expressions starting with ``//``.
        """
        if self.expression.startswith(("/", "(")):
            return f"xpath={self.expression}"
        return self.expression

    def for_index(self, index: int) -> "Locator":
        return Locator(expression=self.expression.replace(INDEX_PLACEHOLDER, str(index)))

    def __str__(self) -> str:
        return self.expression


class LocatorChain(BaseModel):
    """Ordered, non-empty fallback list for one logical element."""

    model_config = ConfigDict(frozen=True)

    name: str
    locators: tuple[Locator, ...] = Field(min_length=1)

    @classmethod
    def of(cls, name: str, expressions: list[str] | tuple[str, ...]) -> "LocatorChain":
        """Build a chain from raw expressions, preserving their order."""
        return cls(
            name=name,
            locators=tuple(Locator(expression=expression) for expression in expressions),
        )

    def for_index(self, index: int) -> "LocatorChain":
        """Substitute ``{index}`` in every entry, for co-indexed row groups."""
        return LocatorChain(
            name=f"{self.name}[{index}]",
            locators=tuple(locator.for_index(index) for locator in self.locators),
        )

    def __len__(self) -> int:
        return len(self.locators)


class DocumentContext(Protocol):
    """Document-like context the locator machinery evaluates against."""

    async def query(self, locator: Locator) -> Any | None:
        """Return the first node matching ``locator`` or None."""
        ...

    async def activate(self, handle: Any) -> None:
        """Simulate a click on a node returned by ``query``."""
        ...

    async def read(self, handle: Any, attribute: str | None = None) -> str | None:
        """Return a node's text content, or an attribute value when named."""
        ...


async def resolve(chain: LocatorChain, document: DocumentContext) -> Any | None:
    """Return the node matched by the first successful chain entry.

    Entries are evaluated strictly in order and evaluation stops at the
    first match. A query that raises counts as a miss.

    Returns:
        The matched node, or None once every entry has been tried.
    """
    for position, locator in enumerate(chain.locators, start=1):
        try:
            handle = await document.query(locator)
        except PlaywrightError as exc:
            log.warning(
                "Locator query raised",
                chain=chain.name,
                position=position,
                locator=locator.expression,
                error=str(exc),
            )
            continue

        if handle is not None:
            if position > 1:
                log.info(
                    "Fallback locator matched",
                    chain=chain.name,
                    position=position,
                    locator=locator.expression,
                )
            return handle

        log.debug(
            "Locator returned no result",
            chain=chain.name,
            position=position,
            locator=locator.expression,
        )

    return None


async def _attempt_activation(document: DocumentContext, locator: Locator) -> bool:
    try:
        handle = await document.query(locator)
        if handle is None:
            return False
        await document.activate(handle)
    except PlaywrightError as exc:
        log.debug("Activation attempt raised", locator=locator.expression, error=str(exc))
        return False
    return True


def _log_retry(chain: LocatorChain, locator: Locator):
    def _before_sleep(retry_state: RetryCallState) -> None:
        log.debug(
            "Activation target not ready, retrying",
            chain=chain.name,
            locator=locator.expression,
            attempt=retry_state.attempt_number,
            delay_s=retry_state.upcoming_sleep,
        )

    return _before_sleep


async def activate_with_retry(
    chain: LocatorChain,
    document: DocumentContext,
    max_attempts: int = 2,
    retry_delay_ms: int = 1000,
) -> Locator | None:
    """Find and click the first activatable entry of ``chain``.

    Each entry gets up to ``max_attempts`` tries separated by a fixed
    ``retry_delay_ms``; the next entry is only tried once the current one
    has used all of its attempts.

    Returns:
        The locator that was activated, or None if no entry succeeded.
    """
    for position, locator in enumerate(chain.locators, start=1):
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_fixed(retry_delay_ms / 1000),
            retry=retry_if_result(lambda activated: not activated),
            retry_error_callback=lambda retry_state: False,
            before_sleep=_log_retry(chain, locator),
        )
        activated = await retrying(_attempt_activation, document, locator)

        if activated:
            log.info(
                "Activation succeeded",
                chain=chain.name,
                position=position,
                locator=locator.expression,
            )
            return locator

        log.warning(
            "Activation locator exhausted",
            chain=chain.name,
            position=position,
            attempts=max_attempts,
            locator=locator.expression,
        )

    return None
