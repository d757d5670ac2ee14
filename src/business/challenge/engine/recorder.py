"""
Trade Recorder - 交易记录

校验交易输入 → 追加交易 → 更新累计盈亏/回撤 → 同步执行爆仓检测。

校验失败时账户不做任何修改。

Usage:
    trade = record_trade(account, catalog.for_phase(account.phase), trade_input)
    if account.is_breached:
        print(account.breach_reason)
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from src.business.challenge.engine.breach import check_breach
from src.business.challenge.models.account import (
    AccountState,
    Trade,
    TradeInput,
    TradeSide,
)
from src.business.challenge.models.errors import AccountBreached, InvalidTradeInput
from src.business.challenge.models.rules import EvaluationPolicy, RuleSet

logger = logging.getLogger(__name__)


def record_trade(
    account: AccountState,
    rule_set: RuleSet,
    trade_input: TradeInput,
    policy: EvaluationPolicy | None = None,
) -> Trade:
    """记录一笔已平仓交易

    Args:
        account: 账户状态 (原地修改)
        rule_set: 当前阶段规则
        trade_input: 交易输入
        policy: 评估策略

    Returns:
        已记录的 Trade

    Raises:
        AccountBreached: 账户已爆仓
        InvalidTradeInput: 数量或价格非正、方向非法
    """
    if account.is_breached:
        logger.warning(f"Trade rejected for {account.trader_id}: account breached")
        raise AccountBreached(
            f"Account breached: {account.breach_reason or 'no further trades accepted'}"
        )

    trade = _build_trade(trade_input)

    account.trades.append(trade)
    account.cumulative_pnl += trade.pnl
    account.peak_drawdown = min(account.peak_drawdown, account.cumulative_pnl)
    account.touch()

    logger.info(
        f"Trade recorded for {account.trader_id}: {trade.symbol} {trade.side.value} "
        f"qty={trade.quantity} pnl={trade.pnl} cumulative={account.cumulative_pnl}"
    )

    check_breach(account, rule_set, policy)
    return trade


def _build_trade(trade_input: TradeInput) -> Trade:
    """校验输入并创建 Trade"""
    symbol = (trade_input.symbol or "").strip()
    if not symbol:
        raise InvalidTradeInput("Symbol is required")

    try:
        side = TradeSide(str(getattr(trade_input.side, "value", trade_input.side)).lower())
    except ValueError as e:
        raise InvalidTradeInput(f"Invalid side: {trade_input.side!r}") from e

    quantity = _positive_decimal(trade_input.quantity, "quantity")
    entry_price = _positive_decimal(trade_input.entry_price, "entry_price")
    exit_price = _positive_decimal(trade_input.exit_price, "exit_price")

    return Trade.create(
        symbol=symbol,
        side=side,
        quantity=quantity,
        entry_price=entry_price,
        exit_price=exit_price,
        broker=trade_input.broker or "",
        timestamp=trade_input.timestamp,
    )


def _positive_decimal(value: Any, name: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidTradeInput(f"{name} is required")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidTradeInput(f"{name} must be numeric, got {value!r}") from e
    if not number.is_finite() or number <= 0:
        raise InvalidTradeInput(f"{name} must be positive, got {value!r}")
    return number
