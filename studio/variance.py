"""Suggested vs. final quote figures: how far a manual price moved from the engine."""

from .schemas import Calculations, QuoteVariance


def quote_variance(suggested: Calculations, final: Calculations) -> QuoteVariance:
    suggested_total = suggested.total_price or 0.0
    final_total = final.total_price or 0.0

    # Nothing meaningful to compare against
    if suggested_total == 0 or final_total == 0:
        return QuoteVariance(total=0.0, profit=0.0, total_percent=0.0)

    total = final_total - suggested_total
    profit = (final.profit_amount or 0.0) - (suggested.profit_amount or 0.0)
    return QuoteVariance(
        total=total,
        profit=profit,
        total_percent=total / suggested_total * 100.0,
    )
