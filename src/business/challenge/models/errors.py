"""
Challenge Errors - 考核引擎错误类型

所有错误均可由调用方恢复：适配层把错误翻译为用户提示，账户状态保持不变。

定义:
- ChallengeError: 错误基类
- InvalidTradeInput: 交易输入非法 (数量/价格非正)
- AccountBreached: 账户已爆仓
- ProfitTargetNotMet: 未达到盈利目标
- MinimumActivityNotMet: 交易笔数/交易天数不足
- AlreadyAtFinalPhase: 已处于最终阶段
- NotEligible: 不满足出金/晋级资格
- KycRequired: 未完成 KYC
- BelowMinimumWithdrawal: 低于最低出金额
- InvalidRequest: 请求字段缺失
- AccountNotFound / AccountExists: 账户查找错误
- ConfigError: 规则配置非法
"""


class ChallengeError(Exception):
    """考核引擎错误基类

    Attributes:
        code: 稳定的错误码，供适配层映射
        message: 面向用户的提示信息
    """

    code = "CHALLENGE_ERROR"
    default_message = "Challenge operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        """转换为字典"""
        return {"code": self.code, "message": self.message}


class InvalidTradeInput(ChallengeError):
    """交易输入非法"""

    code = "INVALID_TRADE_INPUT"
    default_message = "Invalid trade input"


class AccountBreached(ChallengeError):
    """账户已爆仓，拒绝一切交易与晋级"""

    code = "ACCOUNT_BREACHED"
    default_message = "Account breached"


class ProfitTargetNotMet(ChallengeError):
    """未达到当前阶段盈利目标"""

    code = "PROFIT_TARGET_NOT_MET"
    default_message = "Profit target not met"


class MinimumActivityNotMet(ChallengeError):
    """交易笔数或交易天数不足"""

    code = "MINIMUM_ACTIVITY_NOT_MET"
    default_message = "Minimum trading activity not met"


class AlreadyAtFinalPhase(ChallengeError):
    """已处于 Funded 阶段，无法继续晋级"""

    code = "ALREADY_AT_FINAL_PHASE"
    default_message = "Already at final phase"


class NotEligible(ChallengeError):
    """不满足资格"""

    code = "NOT_ELIGIBLE"
    default_message = "User not eligible for withdrawal"


class KycRequired(NotEligible):
    """进入 Funded 阶段前必须完成 KYC"""

    code = "KYC_REQUIRED"
    default_message = "KYC verification required before funding"


class BelowMinimumWithdrawal(ChallengeError):
    """出金额低于最低限额"""

    code = "BELOW_MINIMUM_WITHDRAWAL"
    default_message = "Withdrawal amount below minimum"


class InvalidRequest(ChallengeError):
    """请求缺少必填字段或格式非法"""

    code = "INVALID_REQUEST"
    default_message = "Missing required fields"


class AccountNotFound(ChallengeError):
    """账户不存在"""

    code = "ACCOUNT_NOT_FOUND"
    default_message = "User not found"


class AccountExists(ChallengeError):
    """账户已存在"""

    code = "ACCOUNT_EXISTS"
    default_message = "User already registered"


class ConfigError(ChallengeError):
    """规则配置非法"""

    code = "CONFIG_ERROR"
    default_message = "Invalid challenge configuration"
