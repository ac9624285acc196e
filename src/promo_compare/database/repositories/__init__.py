"""Repositories over the promotions database."""

from promo_compare.database.repositories.promotions import PromotionRepository


__all__ = ["PromotionRepository"]
