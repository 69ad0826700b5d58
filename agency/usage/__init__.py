from .aggregator import BASELINE_KEY, BudgetReport, UsageAggregator, daily_log_key, recompute
from .costs import FALLBACK_TOOL_COST, TOOL_COSTS, tool_tokens
from .report import generate_report

__all__ = [
    "BASELINE_KEY",
    "FALLBACK_TOOL_COST",
    "TOOL_COSTS",
    "BudgetReport",
    "UsageAggregator",
    "daily_log_key",
    "generate_report",
    "recompute",
    "tool_tokens",
]
