"""Challenge Models - 考核引擎数据模型"""

from src.business.challenge.models.account import (
    AccountState,
    AccountStatus,
    Trade,
    TradeInput,
    TradeSide,
)
from src.business.challenge.models.errors import (
    AccountBreached,
    AccountExists,
    AccountNotFound,
    AlreadyAtFinalPhase,
    BelowMinimumWithdrawal,
    ChallengeError,
    ConfigError,
    InvalidRequest,
    InvalidTradeInput,
    KycRequired,
    MinimumActivityNotMet,
    NotEligible,
    ProfitTargetNotMet,
)
from src.business.challenge.models.results import AdvanceResult, BreachResult
from src.business.challenge.models.rules import (
    AdminSettings,
    ChallengeSettings,
    EvaluationPolicy,
    FundedCapitalPolicy,
    Phase,
    RuleCatalog,
    RuleSet,
)
from src.business.challenge.models.withdrawal import (
    BankDetails,
    Withdrawal,
    WithdrawalStatus,
)

__all__ = [
    # Rule models
    "Phase",
    "RuleSet",
    "RuleCatalog",
    "AdminSettings",
    "FundedCapitalPolicy",
    "EvaluationPolicy",
    "ChallengeSettings",
    # Account models
    "TradeSide",
    "AccountStatus",
    "TradeInput",
    "Trade",
    "AccountState",
    # Withdrawal models
    "WithdrawalStatus",
    "BankDetails",
    "Withdrawal",
    # Results
    "BreachResult",
    "AdvanceResult",
    # Errors
    "ChallengeError",
    "InvalidTradeInput",
    "AccountBreached",
    "ProfitTargetNotMet",
    "MinimumActivityNotMet",
    "AlreadyAtFinalPhase",
    "NotEligible",
    "KycRequired",
    "BelowMinimumWithdrawal",
    "InvalidRequest",
    "AccountNotFound",
    "AccountExists",
    "ConfigError",
]
