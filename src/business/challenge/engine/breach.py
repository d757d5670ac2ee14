"""
Breach Detector - 爆仓检测

每笔交易记录后同步调用，检查亏损是否触及规则上限。

规则:
- 总回撤: abs(peak_drawdown) >= initial_amount * max_total_drawdown_pct → 爆仓
- 单日回撤: 仅在 EvaluationPolicy.enforce_daily_drawdown 开启时检查

爆仓为终态，任何操作都不会撤销。
"""

import logging

from src.business.challenge.models.account import AccountState, AccountStatus
from src.business.challenge.models.results import BreachResult
from src.business.challenge.models.rules import EvaluationPolicy, RuleSet

logger = logging.getLogger(__name__)

TOTAL_LOSS_REASON = "Loss limit exceeded"
DAILY_LOSS_REASON = "Daily loss limit exceeded"


def check_breach(
    account: AccountState,
    rule_set: RuleSet,
    policy: EvaluationPolicy | None = None,
) -> BreachResult:
    """检查账户是否爆仓

    幂等：已爆仓账户直接返回原有原因，不做任何修改。

    Args:
        account: 账户状态
        rule_set: 当前阶段规则
        policy: 评估策略 (默认只检查总回撤)

    Returns:
        BreachResult
    """
    if account.is_breached:
        return BreachResult(breached=True, reason=account.breach_reason)

    policy = policy or EvaluationPolicy()

    total_loss = abs(account.peak_drawdown)
    total_limit = account.initial_amount * rule_set.max_total_drawdown_pct
    if total_loss > 0 and total_loss >= total_limit:
        return _mark_breached(account, TOTAL_LOSS_REASON, total_loss, total_limit)

    if policy.enforce_daily_drawdown:
        daily_loss = abs(account.daily_drawdown)
        daily_limit = account.initial_amount * rule_set.max_daily_drawdown_pct
        if daily_loss > 0 and daily_loss >= daily_limit:
            return _mark_breached(account, DAILY_LOSS_REASON, daily_loss, daily_limit)

    return BreachResult(breached=False, drawdown=total_loss, limit=total_limit)


def _mark_breached(account, reason, drawdown, limit) -> BreachResult:
    account.status = AccountStatus.BREACHED
    account.breach_reason = reason
    account.touch()
    logger.info(
        f"Account {account.trader_id} breached in {account.phase.value}: "
        f"{reason} (loss={drawdown}, limit={limit})"
    )
    return BreachResult(
        breached=True,
        reason=reason,
        newly_breached=True,
        drawdown=drawdown,
        limit=limit,
    )
