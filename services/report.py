"""
Report service for portfolio-level totals across all traders.
Sums balance engine outputs into receivable, debt and per-commodity figures.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from models import Trader, Transaction, ProductType
from services.balances import AsOf, TraderBalance, compute_balances, visible_product_balances
from services.common import normalize_cutoff, round_money, round_quantity, sort_product_types, to_naive_local

logger = logging.getLogger(__name__)


@dataclass
class PortfolioSummary:
    """Totals across every trader."""
    total_receivable: float = 0.0  # Sum of positive money balances
    total_debt: float = 0.0  # Sum of |negative money balances|
    net_balance: float = 0.0  # total_receivable - total_debt
    per_commodity_net: Dict[str, float] = field(default_factory=dict)
    trader_count: int = 0
    active_trader_count: int = 0
    transaction_count: int = 0  # Transactions on or before the as-of cutoff


class ReportService:
    """
    Service for aggregated reporting.
    Calls the balance engine once per trader and never touches the store.
    """

    @staticmethod
    def trader_balances(
        traders: List[Trader],
        transactions: List[Transaction],
        as_of: AsOf = None
    ) -> Dict[str, TraderBalance]:
        """Balance of every trader, keyed by trader id."""
        return {trader.id: compute_balances(transactions, trader.id, as_of) for trader in traders}

    @staticmethod
    def aggregate(
        traders: List[Trader],
        transactions: List[Transaction],
        as_of: AsOf = None
    ) -> PortfolioSummary:
        """
        Calculate portfolio totals.

        Args:
            traders: All traders
            transactions: All transactions
            as_of: Optional inclusive cutoff applied to every trader and to
                transaction_count

        Returns:
            PortfolioSummary with money rounded to 2 and quantities to 3 decimals
        """
        total_receivable = 0.0
        total_debt = 0.0
        per_commodity: Dict[str, float] = {}
        active = 0

        balances = ReportService.trader_balances(traders, transactions, as_of)
        for balance in balances.values():
            if balance.money_balance > 0:
                total_receivable += balance.money_balance
            else:
                total_debt += abs(balance.money_balance)

            for product_id, quantity in balance.product_balances.items():
                per_commodity[product_id] = per_commodity.get(product_id, 0.0) + quantity

            if not balance.is_settled:
                active += 1

        total_receivable = round_money(total_receivable)
        total_debt = round_money(total_debt)

        return PortfolioSummary(
            total_receivable=total_receivable,
            total_debt=total_debt,
            net_balance=round_money(total_receivable - total_debt),
            per_commodity_net={pid: round_quantity(qty) for pid, qty in per_commodity.items()},
            trader_count=len(traders),
            active_trader_count=active,
            transaction_count=ReportService._count_until(transactions, as_of)
        )

    @staticmethod
    def _count_until(transactions: List[Transaction], as_of: AsOf = None) -> int:
        cutoff = normalize_cutoff(as_of)
        if cutoff is None:
            return len(transactions)
        return sum(1 for tx in transactions if to_naive_local(tx.transaction_date) <= cutoff)

    @staticmethod
    def is_active_trader(trader: Trader, transactions: List[Transaction], as_of: AsOf = None) -> bool:
        """A trader is active while any money or commodity balance is non-zero."""
        return not compute_balances(transactions, trader.id, as_of).is_settled

    @staticmethod
    def receivable_traders(traders: List[Trader], transactions: List[Transaction]) -> List[Trader]:
        """Traders who owe the business money."""
        return [t for t in traders if compute_balances(transactions, t.id).money_balance > 0]

    @staticmethod
    def debtor_traders(traders: List[Trader], transactions: List[Transaction]) -> List[Trader]:
        """Traders the business owes money to."""
        return [t for t in traders if compute_balances(transactions, t.id).money_balance < 0]

    @staticmethod
    def balances_frame(
        traders: List[Trader],
        transactions: List[Transaction],
        product_types: List[ProductType],
        as_of: AsOf = None
    ) -> pd.DataFrame:
        """
        Per-trader balances as a table.

        One row per trader (indexed by trader id) with name, money balance and
        one column per catalog commodity. Dangling commodity ids are left out.
        """
        ordered = sort_product_types(product_types)
        rows = []
        for trader in traders:
            balance = compute_balances(transactions, trader.id, as_of)
            row = {
                'trader_id': trader.id,
                'name': trader.name,
                'money_balance': balance.money_balance,
            }
            for product_type in ordered:
                row[product_type.id] = balance.product_balances.get(product_type.id, 0.0)
            rows.append(row)

        columns = ['trader_id', 'name', 'money_balance'] + [pt.id for pt in ordered]
        return pd.DataFrame(rows, columns=columns).set_index('trader_id')

    @staticmethod
    def format_summary_report(summary: PortfolioSummary, product_types: Optional[List[ProductType]] = None) -> str:
        """
        Format a summary report for display.

        Args:
            summary: PortfolioSummary from aggregate()
            product_types: Catalog used to name commodities

        Returns:
            Formatted report string
        """
        lines = [
            "=" * 60,
            "TRADER LEDGER REPORT",
            "=" * 60,
            "",
            f"Traders:                   {summary.trader_count}",
            f"Active Accounts:           {summary.active_trader_count}",
            f"Transactions:              {summary.transaction_count}",
            "",
            "MONEY",
            "-" * 40,
            f"Total Receivable:          {summary.total_receivable:,.2f}",
            f"Total Debt:                {summary.total_debt:,.2f}",
            f"Net Balance:               {summary.net_balance:+,.2f}",
            "",
            "COMMODITIES",
            "-" * 40,
        ]

        rows = visible_product_balances(summary.per_commodity_net, product_types or [])
        if rows:
            for product_type, quantity in rows:
                lines.append(f"{product_type.name:<27}{quantity:+,.3f} {product_type.unit}")
        else:
            lines.append("  No outstanding commodity balances")

        lines.append("")
        lines.append("=" * 60)

        return "\n".join(lines)
