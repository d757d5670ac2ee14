"""
Challenge Module - 资金账户考核系统

交易员依次通过 EVAL1 → EVAL2 → FUNDED 三个阶段:
- Rule Catalog: 各阶段盈利目标、回撤限制、活跃度要求
- Trade Recorder: 记录交易，更新累计盈亏与回撤
- Breach Detector: 亏损触及上限即爆仓 (终态)
- Phase Advancer: 满足条件后晋级并重置阶段计数
- Withdrawal Calculator: FUNDED 阶段按佣金比例计算出金

核心 (engine) 为纯函数；service 负责加锁、加载与持久化。
"""

from src.business.challenge.engine import (
    advance_phase,
    check_breach,
    record_trade,
    request_withdrawal,
)
from src.business.challenge.models import (
    AccountState,
    AccountStatus,
    AdminSettings,
    AdvanceResult,
    BreachResult,
    ChallengeError,
    ChallengeSettings,
    EvaluationPolicy,
    FundedCapitalPolicy,
    Phase,
    RuleCatalog,
    RuleSet,
    Trade,
    TradeInput,
    TradeSide,
    Withdrawal,
)

__all__ = [
    # Engine
    "record_trade",
    "check_breach",
    "advance_phase",
    "request_withdrawal",
    # Models
    "Phase",
    "RuleSet",
    "RuleCatalog",
    "AdminSettings",
    "EvaluationPolicy",
    "FundedCapitalPolicy",
    "ChallengeSettings",
    "TradeSide",
    "TradeInput",
    "Trade",
    "AccountStatus",
    "AccountState",
    "Withdrawal",
    "BreachResult",
    "AdvanceResult",
    "ChallengeError",
]
