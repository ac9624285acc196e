"""Application lifecycle events."""

from promo_compare.core.events.lifespan import lifespan


__all__ = ["lifespan"]
