"""
Pytest fixtures for challenge module tests.

提供规则目录、已激活账户与交易输入工厂。
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest

from src.business.challenge.models.account import (
    AccountState,
    AccountStatus,
    TradeInput,
)
from src.business.challenge.models.rules import (
    EvaluationPolicy,
    Phase,
    RuleCatalog,
    RuleSet,
)


@pytest.fixture
def eval_rules() -> RuleSet:
    """50K 评估阶段规则 (10% 目标 / 10% 总回撤 / 5 笔交易)"""
    return RuleSet(
        name="Evaluation Phase 1",
        account_size=Decimal("50000"),
        profit_target_pct=Decimal("0.10"),
        max_daily_drawdown_pct=Decimal("0.05"),
        max_total_drawdown_pct=Decimal("0.10"),
        min_trades=5,
        min_trading_days=3,
    )


@pytest.fixture
def catalog(eval_rules: RuleSet) -> RuleCatalog:
    """规则目录"""
    return RuleCatalog(
        eval1=eval_rules,
        eval2=RuleSet(
            name="Verification Phase",
            account_size=Decimal("50000"),
            profit_target_pct=Decimal("0.10"),
            max_daily_drawdown_pct=Decimal("0.05"),
            max_total_drawdown_pct=Decimal("0.10"),
            min_trades=5,
            min_trading_days=3,
        ),
        funded=RuleSet(
            name="Live Funded Trading",
            account_size=Decimal("100000"),
            profit_target_pct=Decimal("0.15"),
            max_daily_drawdown_pct=Decimal("0.03"),
            max_total_drawdown_pct=Decimal("0.15"),
            profit_share_pct=Decimal("80"),
        ),
    )


@pytest.fixture
def policy() -> EvaluationPolicy:
    """默认评估策略"""
    return EvaluationPolicy()


@pytest.fixture
def account() -> AccountState:
    """已付款激活的 EVAL1 账户"""
    return AccountState(
        trader_id="T001",
        name="Alice",
        email="alice@example.com",
        initial_amount=Decimal("50000"),
    )


@pytest.fixture
def funded_account() -> AccountState:
    """FUNDED 阶段账户"""
    return AccountState(
        trader_id="T100",
        name="Bob",
        email="bob@example.com",
        phase=Phase.FUNDED,
        status=AccountStatus.FUNDED_LIVE,
        initial_amount=Decimal("100000"),
        kyc_verified=True,
    )


@pytest.fixture
def make_trade() -> Callable[..., TradeInput]:
    """交易输入工厂

    pnl = (exit - entry) * quantity；默认 entry=100000，quantity=1，
    make_trade(pnl) 得到恰好 pnl 的交易。
    """

    def _make(
        pnl: float | int | str = 0,
        quantity: float | int | str = 1,
        entry: float | int | str = 100000,
        symbol: str = "EURUSD",
        side: str = "buy",
        timestamp: datetime | None = None,
    ) -> TradeInput:
        entry_dec = Decimal(str(entry))
        qty_dec = Decimal(str(quantity))
        exit_dec = entry_dec + Decimal(str(pnl)) / qty_dec
        return TradeInput(
            symbol=symbol,
            side=side,
            quantity=qty_dec,
            entry_price=entry_dec,
            exit_price=exit_dec,
            broker="paper",
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def day() -> Callable[[int], datetime]:
    """第 N 个交易日的时间戳"""
    base = datetime(2025, 3, 3, 10, 0, 0)

    def _day(n: int) -> datetime:
        return base + timedelta(days=n)

    return _day
