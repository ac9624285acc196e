"""Deterministic plain-text recommendation for a basket comparison."""

from __future__ import annotations

from promo_compare.schemas.comparison import ComparisonSummary
from promo_compare.services.pricing.constants import ANALYSIS_MAX_PRODUCTS


def build_analysis(
    summary: ComparisonSummary,
    max_products: int = ANALYSIS_MAX_PRODUCTS,
) -> str:
    """Summarise a comparison as a short recommendation.

    Lists store totals for stores that found something, the cheapest store,
    up to ``max_products`` products on promotion and the products that were
    not found.
    """
    if summary.products_found == 0:
        return (
            "No promotion found for your products this week. "
            "Try more generic terms or check again when new flyers are published."
        )

    lines = [
        f"Promotions found for {summary.products_found}/"
        f"{summary.total_products} products."
    ]
    if summary.total_promotional_savings > 0:
        lines.append(
            f"Total savings versus regular prices: "
            f"${summary.total_promotional_savings:.2f}."
        )

    lines.append("")
    lines.append("Store totals:")
    for entry in summary.store_totals.values():
        if entry.products_found == 0:
            continue
        lines.append(
            f"- {entry.store}: ${entry.total:.2f} "
            f"({entry.products_found} products, {entry.promotions_found} on sale)"
        )

    if summary.best_store is not None:
        lines.append("")
        if summary.total_savings > 0:
            lines.append(
                f"Best choice: {summary.best_store} "
                f"(saves ${summary.total_savings:.2f}, "
                f"{summary.savings_percentage}% of the most expensive basket)."
            )
        else:
            lines.append(f"Best choice: {summary.best_store}.")

    on_sale = [c for c in summary.comparisons if c.has_promotion]
    if on_sale:
        lines.append("")
        lines.append("On sale:")
        for comparison in on_sale[:max_products]:
            if comparison.best_store is None:
                continue
            best = comparison.stores[comparison.best_store]
            detail = f"- {comparison.product}: {best.store} ${best.price:.2f}"
            if best.discount_percentage:
                detail += f" (-{best.discount_percentage}%)"
            lines.append(detail)

    if summary.missing_products:
        lines.append("")
        lines.append("Not found: " + ", ".join(summary.missing_products) + ".")

    return "\n".join(lines)
