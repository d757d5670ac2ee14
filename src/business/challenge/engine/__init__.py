"""
Challenge Engine - 考核评估核心

纯领域逻辑，不做 I/O:
- record_trade: 记录交易并更新盈亏/回撤
- check_breach: 爆仓检测
- advance_phase: 阶段晋级
- request_withdrawal: 出金计算
"""

from src.business.challenge.engine.advancer import advance_phase
from src.business.challenge.engine.breach import check_breach
from src.business.challenge.engine.recorder import record_trade
from src.business.challenge.engine.withdrawal import request_withdrawal

__all__ = [
    "record_trade",
    "check_breach",
    "advance_phase",
    "request_withdrawal",
]
