"""
Estimation strategy registry.

Strategies are registered once at import time (see
:mod:`app.engine.strategies`).  Selection walks them in priority order
and returns the first one whose data requirements are met, so exactly
one strategy handles any given context.
"""

from __future__ import annotations

from typing import Optional

from app.engine.strategies.base import EstimationStrategy
from app.schemas.estimation import StrategyKind
from app.schemas.profile import EstimationContext


class StrategyRegistry:
    """Registry of available estimation strategies."""

    _strategies: dict[StrategyKind, EstimationStrategy] = {}

    @classmethod
    def register(cls, strategy: EstimationStrategy) -> None:
        """Register a strategy.

        Raises :class:`ValueError` if its kind is already taken.
        """
        if strategy.kind in cls._strategies:
            raise ValueError(f"Strategy '{strategy.kind.value}' already registered")
        cls._strategies[strategy.kind] = strategy

    @classmethod
    def get(cls, kind: StrategyKind) -> Optional[EstimationStrategy]:
        return cls._strategies.get(kind)

    @classmethod
    def ordered(cls) -> list[EstimationStrategy]:
        """All strategies, highest priority (lowest number) first."""
        return sorted(cls._strategies.values(), key=lambda s: s.priority)

    @classmethod
    def select(cls, context: EstimationContext) -> EstimationStrategy:
        """Return the single strategy that handles *context*.

        Raises :class:`LookupError` if no registered strategy applies,
        which only happens when the fallback strategy is missing.
        """
        for strategy in cls.ordered():
            if strategy.applies_to(context):
                return strategy
        raise LookupError(f"No estimation strategy applies. Registered: {[k.value for k in cls._strategies]}")

    @classmethod
    def clear(cls) -> None:
        """Remove all strategies.  Useful for testing."""
        cls._strategies.clear()
