"""
Result Models - 引擎操作结果

定义:
- BreachResult: 爆仓检查结果
- AdvanceResult: 阶段晋级结果
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.business.challenge.models.account import AccountStatus
from src.business.challenge.models.rules import Phase


@dataclass(frozen=True)
class BreachResult:
    """爆仓检查结果

    Attributes:
        breached: 检查后账户是否处于爆仓状态
        reason: 爆仓原因
        newly_breached: 是否为本次检查触发
        drawdown: 参与比较的亏损额 (正数)
        limit: 亏损额度
    """

    breached: bool
    reason: str | None = None
    newly_breached: bool = False
    drawdown: Decimal | None = None
    limit: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "breached": self.breached,
            "reason": self.reason,
            "newly_breached": self.newly_breached,
            "drawdown": str(self.drawdown) if self.drawdown is not None else None,
            "limit": str(self.limit) if self.limit is not None else None,
        }


@dataclass(frozen=True)
class AdvanceResult:
    """阶段晋级结果"""

    previous_phase: Phase
    new_phase: Phase
    status: AccountStatus
    initial_amount: Decimal
    profit_percent: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "previous_phase": self.previous_phase.value,
            "new_phase": self.new_phase.value,
            "status": self.status.value,
            "initial_amount": str(self.initial_amount),
            "profit_percent": str(self.profit_percent),
        }
