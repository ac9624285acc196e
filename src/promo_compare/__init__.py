"""Promo Compare service.

Matches free-text shopping list items against retailer flyer promotions and
recommends the cheapest store for the basket.
"""

__version__ = "0.1.0"
