"""
Withdrawal Models - 出金数据模型

定义:
- WithdrawalStatus: 出金状态
- BankDetails: 收款账户信息
- Withdrawal: 出金申请记录
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class WithdrawalStatus(str, Enum):
    """出金状态"""

    REQUESTED = "requested"
    PROCESSING = "processing"


@dataclass(frozen=True)
class BankDetails:
    """收款账户"""

    bank_holder: str | None = None
    bank_account: str | None = None
    bank_ifsc: str | None = None
    bank_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bank_holder": self.bank_holder,
            "bank_account": self.bank_account,
            "bank_ifsc": self.bank_ifsc,
            "bank_name": self.bank_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BankDetails":
        return cls(
            bank_holder=data.get("bank_holder"),
            bank_account=data.get("bank_account"),
            bank_ifsc=data.get("bank_ifsc"),
            bank_name=data.get("bank_name"),
        )


@dataclass(frozen=True)
class Withdrawal:
    """出金申请

    trader_share = gross_profit * (100 - commission_pct) / 100
    """

    withdrawal_id: str
    trader_id: str
    gross_profit: Decimal
    commission_pct: Decimal
    trader_share: Decimal
    status: WithdrawalStatus = WithdrawalStatus.PROCESSING
    processing_days: int = 0
    bank: BankDetails = field(default_factory=BankDetails)
    requested_at: datetime = field(default_factory=datetime.now)

    @property
    def amount(self) -> Decimal:
        """实际支付给交易员的金额"""
        return self.trader_share

    @property
    def commission_amount(self) -> Decimal:
        """平台佣金"""
        return self.gross_profit - self.trader_share

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "withdrawal_id": self.withdrawal_id,
            "trader_id": self.trader_id,
            "gross_profit": str(self.gross_profit),
            "commission_pct": str(self.commission_pct),
            "trader_share": str(self.trader_share),
            "status": self.status.value,
            "processing_days": self.processing_days,
            "bank": self.bank.to_dict(),
            "requested_at": self.requested_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Withdrawal":
        """从字典创建"""
        return cls(
            withdrawal_id=data["withdrawal_id"],
            trader_id=data["trader_id"],
            gross_profit=Decimal(data["gross_profit"]),
            commission_pct=Decimal(data["commission_pct"]),
            trader_share=Decimal(data["trader_share"]),
            status=WithdrawalStatus(data.get("status", "processing")),
            processing_days=data.get("processing_days", 0),
            bank=BankDetails.from_dict(data.get("bank") or {}),
            requested_at=datetime.fromisoformat(data["requested_at"]),
        )
