"""Aggregation and display helpers for transaction summaries."""

from backend.reporting.summary import (
    build_dashboard_view,
    format_money,
    summarize_transactions,
)

__all__ = ["build_dashboard_view", "format_money", "summarize_transactions"]
