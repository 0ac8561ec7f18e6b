"""Ordered card-extraction strategies for the results page"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from loguru import logger

from .config import CARD_SELECTORS, SELECTOR_TIMEOUT_MS

log = logger.bind(component="strategies")


@dataclass
class StrategyResult:
    """What one strategy found: the matching card handles, or nothing"""

    strategy: Optional["SelectorStrategy"]
    cards: List[Any] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return bool(self.cards)

    @classmethod
    def no_match(cls, strategy: Optional["SelectorStrategy"] = None) -> "StrategyResult":
        return cls(strategy=strategy, cards=[])


class SelectorStrategy:
    """Locate flight cards with a single CSS selector"""

    def __init__(self, selector: str, timeout_ms: int = SELECTOR_TIMEOUT_MS):
        self.selector = selector
        self.timeout_ms = timeout_ms

    def __repr__(self) -> str:
        return f"SelectorStrategy({self.selector!r})"

    async def find_cards(self, page) -> StrategyResult:
        """
        Wait for the selector, then collect every matching element.

        A timeout or any automation error is a no-match, not a failure:
        the next strategy in the chain gets its turn.
        """
        try:
            await page.wait_for_selector(self.selector, timeout=self.timeout_ms)
            cards = await page.query_selector_all(self.selector)
        except Exception as e:
            log.debug(f"Selector {self.selector} did not match: {e}")
            return StrategyResult.no_match(self)

        if not cards:
            return StrategyResult.no_match(self)

        return StrategyResult(strategy=self, cards=list(cards))


def default_strategies(timeout_ms: int = SELECTOR_TIMEOUT_MS) -> List[SelectorStrategy]:
    """Card selectors, most specific first"""
    return [SelectorStrategy(selector, timeout_ms) for selector in CARD_SELECTORS]


async def find_flight_cards(page, strategies: Sequence[SelectorStrategy]) -> StrategyResult:
    """Run strategies in order; the first one that finds cards wins"""
    for strategy in strategies:
        result = await strategy.find_cards(page)
        if result.matched:
            log.info(f"Found {len(result.cards)} flights using selector: {strategy.selector}")
            return result

    return StrategyResult.no_match()
