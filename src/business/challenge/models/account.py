"""
Account Models - 交易员考核账户

定义:
- TradeSide: 买卖方向
- AccountStatus: 账户状态 (ACTIVE / BREACHED / FUNDED_LIVE)
- TradeInput: 未校验的交易输入
- Trade: 已记录交易 (不可变)
- AccountState: 单个交易员的考核进度

AccountState 只能通过 engine 中的操作修改。
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from src.business.challenge.models.errors import InvalidTradeInput
from src.business.challenge.models.rules import Phase
from src.business.challenge.models.withdrawal import Withdrawal

ZERO = Decimal("0")


class TradeSide(str, Enum):
    """买卖方向

    仅作记录，不参与盈亏计算。
    """

    BUY = "buy"
    SELL = "sell"


class AccountStatus(str, Enum):
    """账户状态

    BREACHED 为终态。
    """

    ACTIVE = "active"
    BREACHED = "breached"
    FUNDED_LIVE = "funded_live"


@dataclass
class TradeInput:
    """交易输入 (来自适配层，数值尚未校验)"""

    symbol: str
    side: str | TradeSide
    quantity: Any
    entry_price: Any
    exit_price: Any
    broker: str = ""
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TradeInput":
        """从请求字典创建

        timestamp 接受 datetime 或 ISO 8601 字符串，空字符串视为未提供。
        """
        timestamp = data.get("timestamp") or None
        if isinstance(timestamp, str):
            try:
                timestamp = datetime.fromisoformat(timestamp)
            except ValueError as e:
                raise InvalidTradeInput(f"Invalid timestamp: {timestamp!r}") from e
        return cls(
            symbol=data.get("symbol", ""),
            side=data.get("side", TradeSide.BUY.value),
            quantity=data.get("quantity"),
            entry_price=data.get("entry_price"),
            exit_price=data.get("exit_price"),
            broker=data.get("broker", ""),
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class Trade:
    """已记录交易

    pnl = (exit_price - entry_price) * quantity
    pnl_percent = (exit_price - entry_price) / entry_price * 100
    """

    trade_id: str
    symbol: str
    side: TradeSide
    quantity: Decimal
    entry_price: Decimal
    exit_price: Decimal
    pnl: Decimal
    pnl_percent: Decimal
    broker: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        symbol: str,
        side: TradeSide,
        quantity: Decimal,
        entry_price: Decimal,
        exit_price: Decimal,
        broker: str = "",
        timestamp: datetime | None = None,
    ) -> "Trade":
        """创建交易并计算盈亏"""
        move = exit_price - entry_price
        return cls(
            trade_id=f"TRADE_{uuid.uuid4().hex[:12].upper()}",
            symbol=symbol,
            side=side,
            quantity=quantity,
            entry_price=entry_price,
            exit_price=exit_price,
            pnl=move * quantity,
            pnl_percent=move / entry_price * 100,
            broker=broker,
            timestamp=timestamp or datetime.now(),
        )

    @property
    def trade_date(self) -> date:
        return self.timestamp.date()

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "trade_id": self.trade_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": str(self.quantity),
            "entry_price": str(self.entry_price),
            "exit_price": str(self.exit_price),
            "pnl": str(self.pnl),
            "pnl_percent": str(self.pnl_percent),
            "broker": self.broker,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Trade":
        """从字典创建"""
        return cls(
            trade_id=data["trade_id"],
            symbol=data["symbol"],
            side=TradeSide(data["side"]),
            quantity=Decimal(data["quantity"]),
            entry_price=Decimal(data["entry_price"]),
            exit_price=Decimal(data["exit_price"]),
            pnl=Decimal(data["pnl"]),
            pnl_percent=Decimal(data["pnl_percent"]),
            broker=data.get("broker", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class AccountState:
    """交易员考核账户状态

    不变量:
    - peak_drawdown <= 0，等于本阶段累计盈亏前缀和的最小值 (与 0 取小)
    - status == BREACHED 后不再接受交易与晋级
    - trades 在阶段内只追加，晋级时清空
    """

    trader_id: str
    name: str = ""
    email: str = ""
    phone: str | None = None

    # 考核进度
    phase: Phase = Phase.EVAL1
    status: AccountStatus = AccountStatus.ACTIVE
    initial_amount: Decimal = ZERO
    cumulative_pnl: Decimal = ZERO
    peak_drawdown: Decimal = ZERO
    trades: list[Trade] = field(default_factory=list)
    breach_reason: str | None = None

    # 外部输入
    kyc_verified: bool = False

    # 出金
    withdrawal_status: str = "none"
    last_withdrawal: Withdrawal | None = None

    registered_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def account_balance(self) -> Decimal:
        """账户余额 = 阶段初始资金 + 累计盈亏"""
        return self.initial_amount + self.cumulative_pnl

    @property
    def is_breached(self) -> bool:
        return self.status == AccountStatus.BREACHED

    @property
    def trade_count(self) -> int:
        return len(self.trades)

    @property
    def trading_days(self) -> int:
        """本阶段有交易的自然日数"""
        return len({t.trade_date for t in self.trades})

    @property
    def profit_ratio(self) -> Decimal:
        """累计盈利比例 (0.10 = 10%)"""
        if self.initial_amount <= 0:
            return ZERO
        return self.cumulative_pnl / self.initial_amount

    @property
    def profit_percent(self) -> Decimal:
        return self.profit_ratio * 100

    @property
    def daily_pnl(self) -> Decimal:
        """最近交易日的已实现盈亏"""
        today = self._last_trade_date()
        return sum((t.pnl for t in self.trades if t.trade_date == today), ZERO)

    @property
    def daily_drawdown(self) -> Decimal:
        """最近交易日内累计盈亏的最低点 (<= 0)"""
        today = self._last_trade_date()
        running = ZERO
        low = ZERO
        for t in self.trades:
            if t.trade_date != today:
                continue
            running += t.pnl
            low = min(low, running)
        return low

    def _last_trade_date(self) -> date | None:
        if not self.trades:
            return None
        return self.trades[-1].trade_date

    def reset_phase_counters(self, initial_amount: Decimal) -> None:
        """晋级时重置阶段计数"""
        self.initial_amount = initial_amount
        self.cumulative_pnl = ZERO
        self.peak_drawdown = ZERO
        self.trades = []

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """转换为持久化文档"""
        return {
            "trader_id": self.trader_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "phase": self.phase.value,
            "status": self.status.value,
            "initial_amount": str(self.initial_amount),
            "cumulative_pnl": str(self.cumulative_pnl),
            "peak_drawdown": str(self.peak_drawdown),
            "account_balance": str(self.account_balance),
            "trades": [t.to_dict() for t in self.trades],
            "trading_days": self.trading_days,
            "breach_reason": self.breach_reason,
            "kyc_verified": self.kyc_verified,
            "withdrawal_status": self.withdrawal_status,
            "last_withdrawal": (
                self.last_withdrawal.to_dict() if self.last_withdrawal else None
            ),
            "registered_at": self.registered_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountState":
        """从持久化文档创建

        account_balance / trading_days 为派生字段，读取时忽略。
        """
        last_withdrawal = data.get("last_withdrawal")
        return cls(
            trader_id=data["trader_id"],
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone"),
            phase=Phase.parse(data.get("phase", Phase.EVAL1.value)),
            status=AccountStatus(data.get("status", AccountStatus.ACTIVE.value)),
            initial_amount=Decimal(data.get("initial_amount", "0")),
            cumulative_pnl=Decimal(data.get("cumulative_pnl", "0")),
            peak_drawdown=Decimal(data.get("peak_drawdown", "0")),
            trades=[Trade.from_dict(t) for t in data.get("trades", [])],
            breach_reason=data.get("breach_reason"),
            kyc_verified=data.get("kyc_verified", False),
            withdrawal_status=data.get("withdrawal_status", "none"),
            last_withdrawal=(
                Withdrawal.from_dict(last_withdrawal) if last_withdrawal else None
            ),
            registered_at=datetime.fromisoformat(data["registered_at"])
            if data.get("registered_at")
            else datetime.now(),
            updated_at=datetime.fromisoformat(data["updated_at"])
            if data.get("updated_at")
            else datetime.now(),
        )
