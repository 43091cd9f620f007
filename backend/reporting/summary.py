"""Income/expense aggregation and dashboard rendering."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Context, Decimal, ROUND_HALF_UP, getcontext

from backend.repositories.transactions_repository import sort_newest_first
from shared.models import (
    CardTone,
    DashboardCard,
    DashboardRow,
    DashboardView,
    Transaction,
    TransactionSummary,
    TransactionType,
)


EMPTY_DASHBOARD_MESSAGE = "No transactions yet"
_CENT = Decimal("0.01")


def format_money(value: Decimal) -> str:
    """Format an amount as `$1234.50`; negatives render as `-$12.50`."""

    # Room for every integer digit plus the cents, whatever the ambient precision.
    context = Context(prec=max(getcontext().prec, value.adjusted() + 3))
    quantized = value.quantize(_CENT, rounding=ROUND_HALF_UP, context=context)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    if quantized < 0:
        return f"-${quantized.copy_abs():.2f}"
    return f"${quantized:.2f}"


def format_signed_amount(transaction: Transaction) -> str:
    sign = "+" if transaction.type == TransactionType.INCOME else "-"
    return f"{sign}{format_money(transaction.amount)}"


def format_display_date(transaction: Transaction) -> str:
    value = transaction.date
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def summarize_transactions(transactions: Iterable[Transaction]) -> TransactionSummary:
    """Recompute income, expense and net totals from scratch."""

    total_income = Decimal("0")
    total_expenses = Decimal("0")
    count = 0
    for transaction in transactions:
        count += 1
        if transaction.type == TransactionType.INCOME:
            total_income += transaction.amount
        else:
            total_expenses += transaction.amount

    return TransactionSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
        count=count,
    )


def build_dashboard_view(transactions: Iterable[Transaction]) -> DashboardView:
    rows = sort_newest_first(list(transactions))
    summary = summarize_transactions(rows)
    net_tone = CardTone.POSITIVE if summary.net_balance >= 0 else CardTone.NEGATIVE

    cards = [
        DashboardCard(label="Total Income", value=format_money(summary.total_income), tone=CardTone.POSITIVE),
        DashboardCard(label="Total Expenses", value=format_money(summary.total_expenses), tone=CardTone.NEGATIVE),
        DashboardCard(label="Net Balance", value=format_money(summary.net_balance), tone=net_tone),
    ]
    table = [
        DashboardRow(
            id=transaction.id,
            date=format_display_date(transaction),
            description=transaction.description,
            type=transaction.type,
            amount=format_signed_amount(transaction),
        )
        for transaction in rows
    ]
    return DashboardView(
        summary=summary,
        cards=cards,
        rows=table,
        is_empty=not table,
        empty_message=EMPTY_DASHBOARD_MESSAGE if not table else None,
    )
