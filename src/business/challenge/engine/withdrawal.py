"""
Withdrawal Calculator - 出金计算

仅 FUNDED 阶段且未爆仓的账户可申请出金。
trader_share = cumulative_pnl * (100 - commission_pct) / 100

纯计算，不扣减 cumulative_pnl。
"""

import logging
import uuid

from src.business.challenge.models.account import AccountState
from src.business.challenge.models.errors import (
    AccountBreached,
    BelowMinimumWithdrawal,
    NotEligible,
)
from src.business.challenge.models.rules import AdminSettings, Phase
from src.business.challenge.models.withdrawal import (
    BankDetails,
    Withdrawal,
    WithdrawalStatus,
)

logger = logging.getLogger(__name__)


def request_withdrawal(
    account: AccountState,
    admin: AdminSettings,
    bank: BankDetails | None = None,
) -> Withdrawal:
    """计算出金申请

    Raises:
        NotEligible: 不在 FUNDED 阶段
        AccountBreached: 账户已爆仓
        BelowMinimumWithdrawal: 交易员分成低于最低出金额
    """
    if account.phase != Phase.FUNDED:
        raise NotEligible()
    if account.is_breached:
        raise AccountBreached()

    gross_profit = account.cumulative_pnl
    trader_share = gross_profit * (100 - admin.commission_pct) / 100

    if trader_share < admin.min_withdrawal:
        logger.warning(
            f"Withdrawal rejected for {account.trader_id}: "
            f"share {trader_share} < minimum {admin.min_withdrawal}"
        )
        raise BelowMinimumWithdrawal(f"Minimum withdrawal is {admin.min_withdrawal}")

    withdrawal = Withdrawal(
        withdrawal_id=f"WITHDRAWAL_{uuid.uuid4().hex[:12].upper()}",
        trader_id=account.trader_id,
        gross_profit=gross_profit,
        commission_pct=admin.commission_pct,
        trader_share=trader_share,
        status=WithdrawalStatus.PROCESSING,
        processing_days=admin.processing_days,
        bank=bank or BankDetails(),
    )
    logger.info(
        f"Withdrawal {withdrawal.withdrawal_id} computed for {account.trader_id}: "
        f"gross={gross_profit} share={trader_share}"
    )
    return withdrawal
