"""Ordered lookup strategies that return the first defined result."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from levelup.core.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Tier(Generic[T]):
    """One named lookup strategy of a :class:`FallbackChain`."""

    name: str
    lookup: Callable[..., Optional[T]]


class FallbackChain(Generic[T]):
    """Evaluate tiers in priority order and return the first non-``None`` value.

    Every tier receives the same positional and keyword arguments, so each one
    can be exercised on its own. When all tiers come up empty the chain returns
    ``default``.
    """

    def __init__(self, name: str, *tiers: Tier[T], default: Optional[T] = None) -> None:
        if not tiers:
            raise ValueError("A fallback chain needs at least one tier")
        self.name = name
        self.tiers: tuple[Tier[T], ...] = tiers
        self.default = default

    def resolve_with_tier(self, *args, **kwargs) -> tuple[Optional[T], str | None]:
        """Return the resolved value and the name of the tier that produced it."""

        for tier in self.tiers:
            value = tier.lookup(*args, **kwargs)
            if value is not None:
                return value, tier.name
        return self.default, None

    def resolve(self, *args, **kwargs) -> Optional[T]:
        value, tier_name = self.resolve_with_tier(*args, **kwargs)
        if tier_name is None:
            LOGGER.debug("%s: no tier matched, using default %r", self.name, self.default)
        return value

    def __repr__(self) -> str:
        names = " -> ".join(tier.name for tier in self.tiers)
        return f"FallbackChain({self.name}: {names})"
