"""
Services package for the trader ledger.
Provides core business logic separated from presentation and data layers.
"""

from services.common import (
    MONEY_DECIMALS,
    QUANTITY_DECIMALS,
    round_to_precision,
    round_money,
    round_quantity,
    parse_date,
    generate_id,
    sort_product_types,
    to_naive_local,
)
from services.balances import (
    BALANCE_EFFECTS,
    TraderBalance,
    compute_balances,
    compute_balance_history,
    visible_product_balances,
    split_product_balances,
)
from services.conversion import (
    TransactionDraft,
    compose_conversion,
    calculate_receivable_quantity,
)
from services.report import ReportService, PortfolioSummary
from services.ledger import (
    LedgerService,
    LedgerError,
    TraderNotFoundError,
    ProductTypeInUseError,
    find_incomplete_conversions,
    describe_transaction_type,
)
from services.backup import export_snapshot, import_snapshot, restore_snapshot

__all__ = [
    # Common utilities
    'MONEY_DECIMALS',
    'QUANTITY_DECIMALS',
    'round_to_precision',
    'round_money',
    'round_quantity',
    'parse_date',
    'generate_id',
    'sort_product_types',
    'to_naive_local',
    # Balance engine
    'BALANCE_EFFECTS',
    'TraderBalance',
    'compute_balances',
    'compute_balance_history',
    'visible_product_balances',
    'split_product_balances',
    # Debt conversion
    'TransactionDraft',
    'compose_conversion',
    'calculate_receivable_quantity',
    # Reporting
    'ReportService',
    'PortfolioSummary',
    # Store-backed actions
    'LedgerService',
    'LedgerError',
    'TraderNotFoundError',
    'ProductTypeInUseError',
    'find_incomplete_conversions',
    'describe_transaction_type',
    # Backup
    'export_snapshot',
    'import_snapshot',
    'restore_snapshot',
]
