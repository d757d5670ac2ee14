"""
Rule Models - 考核规则目录

定义:
- Phase: 考核阶段 (EVAL1 → EVAL2 → FUNDED)
- RuleSet: 单阶段规则 (盈利目标、回撤限制、最少交易数/天数、分成比例)
- RuleCatalog: 三个阶段的规则目录
- AdminSettings: 平台设置 (佣金、最低出金、处理天数)
- FundedCapitalPolicy / EvaluationPolicy: 可配置的评估策略
- ChallengeSettings: 不可变配置快照 (规则目录 + 平台设置 + 策略)

单位约定:
- 回撤与盈利目标为小数比例 (0.10 = 10%)
- commission_pct / profit_share_pct 为整数百分比 (20 = 20%)
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from src.business.challenge.models.errors import ConfigError


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """转换为 Decimal

    float 先转 str，避免二进制误差 (0.1 → Decimal("0.1"))。
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be numeric, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"{name} must be numeric, got {value!r}") from e


def to_int(value: Any, name: str = "value") -> int:
    """转换为 int，非法值抛出 ConfigError"""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")


def to_bool(value: Any, name: str = "value") -> bool:
    """转换为 bool

    接受 bool、0/1 以及 "true"/"false"/"yes"/"no"/"on"/"off" (不区分大小写)。
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _TRUE_STRINGS:
            return True
        if key in _FALSE_STRINGS:
            return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


class Phase(str, Enum):
    """考核阶段

    顺序固定，只能前进；FUNDED 为终点。
    """

    EVAL1 = "eval1"
    EVAL2 = "eval2"
    FUNDED = "funded"

    @classmethod
    def parse(cls, value: "str | Phase") -> "Phase":
        """解析阶段标识，兼容旧版 task1/task2/task3 写法"""
        if isinstance(value, Phase):
            return value
        key = str(value).strip().lower()
        return cls(_PHASE_ALIASES.get(key, key))

    @property
    def is_final(self) -> bool:
        return self is Phase.FUNDED

    def next(self) -> "Phase":
        """下一个阶段；FUNDED 之后没有阶段"""
        order = list(Phase)
        idx = order.index(self)
        if idx + 1 >= len(order):
            raise ValueError(f"{self.value} is the final phase")
        return order[idx + 1]


_PHASE_ALIASES = {
    "task1": Phase.EVAL1.value,
    "task2": Phase.EVAL2.value,
    "task3": Phase.FUNDED.value,
}


@dataclass(frozen=True)
class RuleSet:
    """单阶段规则

    Attributes:
        name: 阶段名称
        account_size: 阶段起始名义资金 (> 0)
        profit_target_pct: 晋级所需累计盈利比例 (Funded 阶段仅作展示)
        max_daily_drawdown_pct: 单日最大亏损比例
        max_total_drawdown_pct: 总最大亏损比例
        min_trades: 晋级前最少交易笔数
        min_trading_days: 晋级前最少交易天数
        profit_share_pct: 交易员分成比例，仅 Funded 阶段
    """

    name: str
    account_size: Decimal
    profit_target_pct: Decimal = Decimal("0")
    max_daily_drawdown_pct: Decimal = Decimal("0")
    max_total_drawdown_pct: Decimal = Decimal("0")
    min_trades: int = 0
    min_trading_days: int = 0
    profit_share_pct: Decimal | None = None

    def __post_init__(self) -> None:
        for name in (
            "account_size",
            "profit_target_pct",
            "max_daily_drawdown_pct",
            "max_total_drawdown_pct",
        ):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))
        if self.profit_share_pct is not None:
            object.__setattr__(
                self,
                "profit_share_pct",
                to_decimal(self.profit_share_pct, "profit_share_pct"),
            )
        object.__setattr__(self, "min_trades", to_int(self.min_trades, "min_trades"))
        object.__setattr__(
            self, "min_trading_days", to_int(self.min_trading_days, "min_trading_days")
        )
        self._validate()

    def _validate(self) -> None:
        if self.account_size <= 0:
            raise ConfigError(f"{self.name}: account_size must be > 0")
        for name in (
            "profit_target_pct",
            "max_daily_drawdown_pct",
            "max_total_drawdown_pct",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{self.name}: {name} must be >= 0")
        if self.profit_share_pct is not None and not (
            0 <= self.profit_share_pct <= 100
        ):
            raise ConfigError(f"{self.name}: profit_share_pct must be within 0-100")
        if self.min_trades < 0 or self.min_trading_days < 0:
            raise ConfigError(f"{self.name}: activity thresholds must be >= 0")

    @property
    def max_total_loss(self) -> Decimal:
        """按 account_size 计算的总亏损额度"""
        return self.account_size * self.max_total_drawdown_pct

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        data: dict[str, Any] = {
            "name": self.name,
            "account_size": str(self.account_size),
            "profit_target_pct": str(self.profit_target_pct),
            "max_daily_drawdown_pct": str(self.max_daily_drawdown_pct),
            "max_total_drawdown_pct": str(self.max_total_drawdown_pct),
            "min_trades": self.min_trades,
            "min_trading_days": self.min_trading_days,
        }
        if self.profit_share_pct is not None:
            data["profit_share_pct"] = str(self.profit_share_pct)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleSet":
        """从字典创建"""
        if "account_size" not in data:
            raise ConfigError("rule set requires account_size")
        return cls(
            name=data.get("name", ""),
            account_size=data["account_size"],
            profit_target_pct=data.get("profit_target_pct", 0),
            max_daily_drawdown_pct=data.get("max_daily_drawdown_pct", 0),
            max_total_drawdown_pct=data.get("max_total_drawdown_pct", 0),
            min_trades=data.get("min_trades", 0),
            min_trading_days=data.get("min_trading_days", 0),
            profit_share_pct=data.get("profit_share_pct"),
        )


DEFAULT_RULES: dict[Phase, RuleSet] = {
    Phase.EVAL1: RuleSet(
        name="Evaluation Phase 1",
        account_size=Decimal("50000"),
        profit_target_pct=Decimal("0.10"),
        max_daily_drawdown_pct=Decimal("0.05"),
        max_total_drawdown_pct=Decimal("0.10"),
        min_trades=5,
        min_trading_days=10,
    ),
    Phase.EVAL2: RuleSet(
        name="Verification Phase",
        account_size=Decimal("50000"),
        profit_target_pct=Decimal("0.10"),
        max_daily_drawdown_pct=Decimal("0.05"),
        max_total_drawdown_pct=Decimal("0.10"),
        min_trades=5,
        min_trading_days=10,
    ),
    Phase.FUNDED: RuleSet(
        name="Live Funded Trading",
        account_size=Decimal("100000"),
        profit_target_pct=Decimal("0.15"),
        max_daily_drawdown_pct=Decimal("0.03"),
        max_total_drawdown_pct=Decimal("0.15"),
        min_trading_days=20,
        profit_share_pct=Decimal("80"),
    ),
}


@dataclass(frozen=True)
class RuleCatalog:
    """规则目录 - 每个阶段一套 RuleSet

    只读，所有账户共享。
    """

    eval1: RuleSet = DEFAULT_RULES[Phase.EVAL1]
    eval2: RuleSet = DEFAULT_RULES[Phase.EVAL2]
    funded: RuleSet = DEFAULT_RULES[Phase.FUNDED]

    def for_phase(self, phase: Phase | str) -> RuleSet:
        """获取阶段规则"""
        return getattr(self, Phase.parse(phase).value)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {phase.value: self.for_phase(phase).to_dict() for phase in Phase}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleCatalog":
        """从字典创建，键可为 eval1/eval2/funded 或 task1/task2/task3"""
        rules: dict[str, RuleSet] = {}
        for key, value in data.items():
            try:
                phase = Phase.parse(key)
            except ValueError as e:
                raise ConfigError(f"Unknown phase in rule catalog: {key}") from e
            rules[phase.value] = RuleSet.from_dict(value)
        missing = [p.value for p in Phase if p.value not in rules]
        if missing:
            raise ConfigError(f"Rule catalog missing phases: {', '.join(missing)}")
        return cls(**rules)


@dataclass(frozen=True)
class AdminSettings:
    """平台设置

    Attributes:
        company_name: 平台名称
        commission_pct: 平台佣金百分比 (20 = 20%)
        min_withdrawal: 最低出金额 (按交易员分成计)
        processing_days: 出金处理天数
    """

    company_name: str = "Instafund"
    commission_pct: Decimal = Decimal("20")
    min_withdrawal: Decimal = Decimal("1000")
    processing_days: int = 3

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "commission_pct", to_decimal(self.commission_pct, "commission_pct")
        )
        object.__setattr__(
            self, "min_withdrawal", to_decimal(self.min_withdrawal, "min_withdrawal")
        )
        object.__setattr__(
            self, "processing_days", to_int(self.processing_days, "processing_days")
        )
        if not (0 <= self.commission_pct <= 100):
            raise ConfigError("commission_pct must be within 0-100")
        if self.min_withdrawal < 0:
            raise ConfigError("min_withdrawal must be >= 0")
        if self.processing_days < 0:
            raise ConfigError("processing_days must be >= 0")

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "company_name": self.company_name,
            "commission_pct": str(self.commission_pct),
            "min_withdrawal": str(self.min_withdrawal),
            "processing_days": self.processing_days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AdminSettings":
        """从字典创建"""
        defaults = cls()
        return cls(
            company_name=data.get("company_name", defaults.company_name),
            commission_pct=data.get("commission_pct", defaults.commission_pct),
            min_withdrawal=data.get("min_withdrawal", defaults.min_withdrawal),
            processing_days=data.get("processing_days", defaults.processing_days),
        )


class FundedCapitalPolicy(str, Enum):
    """晋级后资金基准

    RESET: 使用新阶段 account_size (默认)
    CARRY: 沿用上一阶段的账户余额
    """

    RESET = "reset"
    CARRY = "carry"


@dataclass(frozen=True)
class EvaluationPolicy:
    """评估策略

    默认只检查总回撤，不检查单日回撤与交易天数；以下开关可按需开启。
    """

    funded_capital: FundedCapitalPolicy = FundedCapitalPolicy.RESET
    enforce_daily_drawdown: bool = False
    enforce_min_trading_days: bool = False
    require_kyc_for_funding: bool = True

    def __post_init__(self) -> None:
        try:
            funded_capital = FundedCapitalPolicy(self.funded_capital)
        except ValueError as e:
            raise ConfigError(f"Invalid evaluation policy: {e}") from e
        object.__setattr__(self, "funded_capital", funded_capital)
        for name in (
            "enforce_daily_drawdown",
            "enforce_min_trading_days",
            "require_kyc_for_funding",
        ):
            object.__setattr__(self, name, to_bool(getattr(self, name), name))

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "funded_capital": self.funded_capital.value,
            "enforce_daily_drawdown": self.enforce_daily_drawdown,
            "enforce_min_trading_days": self.enforce_min_trading_days,
            "require_kyc_for_funding": self.require_kyc_for_funding,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvaluationPolicy":
        """从字典创建"""
        defaults = cls()
        return cls(
            funded_capital=data.get("funded_capital", defaults.funded_capital),
            enforce_daily_drawdown=data.get(
                "enforce_daily_drawdown", defaults.enforce_daily_drawdown
            ),
            enforce_min_trading_days=data.get(
                "enforce_min_trading_days", defaults.enforce_min_trading_days
            ),
            require_kyc_for_funding=data.get(
                "require_kyc_for_funding", defaults.require_kyc_for_funding
            ),
        )


@dataclass(frozen=True)
class ChallengeSettings:
    """不可变配置快照

    每次操作开始时读取一次，管理员更新时整体替换 (copy-and-swap)。
    """

    catalog: RuleCatalog = field(default_factory=RuleCatalog)
    admin: AdminSettings = field(default_factory=AdminSettings)
    policy: EvaluationPolicy = field(default_factory=EvaluationPolicy)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "rules": self.catalog.to_dict(),
            "admin": self.admin.to_dict(),
            "policy": self.policy.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChallengeSettings":
        """从字典创建，缺失的节使用默认值"""
        return cls(
            catalog=(
                RuleCatalog.from_dict(data["rules"]) if data.get("rules") else RuleCatalog()
            ),
            admin=AdminSettings.from_dict(data.get("admin") or {}),
            policy=EvaluationPolicy.from_dict(data.get("policy") or {}),
        )
