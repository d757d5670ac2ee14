"""
Challenge Service - 考核服务编排

编排层，协调账户存储、配置快照与考核核心:
1. 加载账户文档
2. 读取配置快照 (每次操作一次)
3. 调用核心函数
4. 成功后持久化

同一交易员的操作串行执行 (每账户一把锁)，不同账户之间可完全并行。
核心函数在新加载的副本上运行，失败时不写回，存储状态保持不变。

Usage:
    service = ChallengeService.from_config(ChallengeConfig.load())
    service.register("trader_001", name="Alice", email="alice@example.com")
    service.confirm_payment("trader_001")
    service.record_trade("trader_001", TradeInput(...))
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from typing import Any

from src.business.challenge.config.challenge_config import ChallengeConfig
from src.business.challenge.engine import (
    advance_phase,
    check_breach,
    record_trade,
    request_withdrawal,
)
from src.business.challenge.models.account import (
    ZERO,
    AccountState,
    AccountStatus,
    Trade,
    TradeInput,
)
from src.business.challenge.models.errors import (
    AccountExists,
    AccountNotFound,
    InvalidRequest,
    NotEligible,
)
from src.business.challenge.models.results import AdvanceResult, BreachResult
from src.business.challenge.models.rules import ChallengeSettings, Phase, to_decimal
from src.business.challenge.models.withdrawal import BankDetails, Withdrawal
from src.business.challenge.settings_store import SettingsStore
from src.business.challenge.store import AccountStore

logger = logging.getLogger(__name__)


class ChallengeService:
    """考核服务

    Usage:
        service = ChallengeService(AccountStore(path), SettingsStore())
        trade = service.record_trade("trader_001", trade_input)
        result = service.advance_phase("trader_001")
    """

    def __init__(
        self,
        store: AccountStore,
        settings_store: SettingsStore | None = None,
    ) -> None:
        """初始化考核服务

        Args:
            store: 账户存储
            settings_store: 配置快照持有者
        """
        self._store = store
        self._settings = settings_store or SettingsStore()
        self._locks: dict[str, Lock] = {}
        self._locks_guard = Lock()

    @classmethod
    def from_config(cls, config: ChallengeConfig) -> "ChallengeService":
        """根据配置创建服务"""
        return cls(
            store=AccountStore(config.storage_path),
            settings_store=SettingsStore(config.settings),
        )

    @property
    def settings(self) -> SettingsStore:
        return self._settings

    # =========================================================================
    # 内部工具
    # =========================================================================

    @contextmanager
    def _account_lock(self, trader_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(trader_id, Lock())
        with lock:
            yield

    def _load(self, trader_id: str) -> AccountState:
        account = self._store.get(trader_id)
        if account is None:
            raise AccountNotFound(f"User not found: {trader_id}")
        return account

    @staticmethod
    def _require_payment(account: AccountState) -> None:
        if account.initial_amount <= 0:
            raise NotEligible(f"Payment not confirmed for {account.trader_id}")

    # =========================================================================
    # 注册与外部事件
    # =========================================================================

    def register(
        self,
        trader_id: str,
        name: str,
        email: str,
        phone: str | None = None,
    ) -> AccountState:
        """注册交易员，账户处于 EVAL1，计数归零，等待付款确认"""
        if not trader_id or not name or not email:
            raise InvalidRequest()

        with self._account_lock(trader_id):
            if self._store.exists(trader_id):
                raise AccountExists(f"User already registered: {trader_id}")
            account = AccountState(
                trader_id=trader_id,
                name=name,
                email=email,
                phone=phone,
            )
            self._store.save(account)

        logger.info(f"Trader registered: {trader_id}")
        return account

    def confirm_payment(
        self,
        trader_id: str,
        amount: Any = None,
    ) -> AccountState:
        """付款确认事件 - 激活 (或重新开始) 考核

        设置 phase=EVAL1、status=ACTIVE，初始资金为 EVAL1 account_size
        (或付款指定金额)，并清空全部阶段计数。
        """
        snapshot = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            if amount is not None:
                initial = to_decimal(amount, "amount")
                if initial <= 0:
                    raise InvalidRequest(f"Payment amount must be positive: {amount}")
            else:
                initial = snapshot.catalog.for_phase(Phase.EVAL1).account_size

            account.phase = Phase.EVAL1
            account.status = AccountStatus.ACTIVE
            account.breach_reason = None
            account.withdrawal_status = "none"
            account.last_withdrawal = None
            account.reset_phase_counters(initial)
            account.touch()
            self._store.save(account)

        logger.info(f"Payment confirmed for {trader_id}: initial amount {initial}")
        return account

    def set_kyc_status(self, trader_id: str, verified: bool) -> AccountState:
        """KYC 审核结果"""
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            account.kyc_verified = verified
            account.touch()
            self._store.save(account)
        logger.info(f"KYC status for {trader_id}: {'verified' if verified else 'unverified'}")
        return account

    # =========================================================================
    # 考核操作
    # =========================================================================

    def record_trade(self, trader_id: str, trade_input: TradeInput) -> Trade:
        """记录交易 (内部同步执行爆仓检测)"""
        snapshot = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            self._require_payment(account)
            trade = record_trade(
                account,
                snapshot.catalog.for_phase(account.phase),
                trade_input,
                snapshot.policy,
            )
            self._store.save(account)
        return trade

    def check_breach(self, trader_id: str) -> BreachResult:
        """显式爆仓检查，新触发时写回"""
        snapshot = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            result = check_breach(
                account,
                snapshot.catalog.for_phase(account.phase),
                snapshot.policy,
            )
            if result.newly_breached:
                self._store.save(account)
        return result

    def advance_phase(self, trader_id: str) -> AdvanceResult:
        """阶段晋级"""
        snapshot = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            self._require_payment(account)
            result = advance_phase(account, snapshot.catalog, snapshot.policy)
            self._store.save(account)
        return result

    def request_withdrawal(
        self,
        trader_id: str,
        bank: BankDetails | None = None,
    ) -> Withdrawal:
        """出金申请

        核心计算不修改盈亏；服务层记录出金状态与最近一次出金。
        """
        snapshot = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
            withdrawal = request_withdrawal(account, snapshot.admin, bank)
            account.withdrawal_status = withdrawal.status.value
            account.last_withdrawal = withdrawal
            account.touch()
            self._store.save(account)
        return withdrawal

    # =========================================================================
    # 查询
    # =========================================================================

    def get_account(self, trader_id: str) -> AccountState:
        with self._account_lock(trader_id):
            return self._load(trader_id)

    def list_accounts(self) -> list[AccountState]:
        return self._store.list_all()

    def summary(self, trader_id: str) -> dict[str, Any]:
        """账户进度摘要 (含当前阶段规则)"""
        snapshot: ChallengeSettings = self._settings.snapshot()
        with self._account_lock(trader_id):
            account = self._load(trader_id)
        rule_set = snapshot.catalog.for_phase(account.phase)
        total_limit = account.initial_amount * rule_set.max_total_drawdown_pct
        return {
            "trader_id": account.trader_id,
            "phase": account.phase.value,
            "phase_name": rule_set.name,
            "status": account.status.value,
            "initial_amount": str(account.initial_amount),
            "account_balance": str(account.account_balance),
            "cumulative_pnl": str(account.cumulative_pnl),
            "profit_percent": str(round(account.profit_percent, 2)),
            "profit_target_percent": str(rule_set.profit_target_pct * 100),
            "peak_drawdown": str(account.peak_drawdown),
            "loss_limit": str(total_limit),
            "loss_remaining": str(max(ZERO, total_limit - abs(account.peak_drawdown))),
            "trades": account.trade_count,
            "min_trades": rule_set.min_trades,
            "trading_days": account.trading_days,
            "min_trading_days": rule_set.min_trading_days,
            "breach_reason": account.breach_reason,
            "kyc_verified": account.kyc_verified,
            "withdrawal_status": account.withdrawal_status,
        }
