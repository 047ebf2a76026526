"""Statistics and period summaries."""

from spendful.queries.executor import SummaryExecutor
from spendful.queries.stats import calculate_spending_stats, category_totals, day_totals

__all__ = [
    "SummaryExecutor",
    "calculate_spending_stats",
    "category_totals",
    "day_totals",
]
