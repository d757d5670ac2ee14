"""
Phase Advancer - 阶段晋级

状态机: EVAL1 → EVAL2 → FUNDED (终点，只接受出金申请)

晋级条件 (当前阶段规则):
1. 账户未爆仓
2. 当前阶段不是 FUNDED
3. cumulative_pnl / initial_amount >= profit_target_pct
4. 交易笔数 >= min_trades
5. 交易天数 >= min_trading_days (仅 enforce_min_trading_days 开启时)
6. 进入 FUNDED 前已完成 KYC (仅 require_kyc_for_funding 开启时)

晋级成功后重置阶段计数，初始资金按 FundedCapitalPolicy 决定。
"""

import logging

from src.business.challenge.models.account import AccountState, AccountStatus
from src.business.challenge.models.errors import (
    AccountBreached,
    AlreadyAtFinalPhase,
    KycRequired,
    MinimumActivityNotMet,
    ProfitTargetNotMet,
)
from src.business.challenge.models.results import AdvanceResult
from src.business.challenge.models.rules import (
    EvaluationPolicy,
    FundedCapitalPolicy,
    Phase,
    RuleCatalog,
)

logger = logging.getLogger(__name__)


def advance_phase(
    account: AccountState,
    catalog: RuleCatalog,
    policy: EvaluationPolicy | None = None,
) -> AdvanceResult:
    """晋级到下一阶段

    所有检查通过后才修改账户。

    Args:
        account: 账户状态 (原地修改)
        catalog: 规则目录 (当前阶段规则用于判断，下一阶段规则用于初始资金)
        policy: 评估策略

    Returns:
        AdvanceResult

    Raises:
        AccountBreached, AlreadyAtFinalPhase, ProfitTargetNotMet,
        MinimumActivityNotMet, KycRequired
    """
    policy = policy or EvaluationPolicy()

    if account.is_breached:
        raise AccountBreached()
    if account.phase.is_final:
        raise AlreadyAtFinalPhase()

    rule_set = catalog.for_phase(account.phase)
    next_phase = account.phase.next()

    if account.profit_ratio < rule_set.profit_target_pct:
        logger.warning(
            f"Advance rejected for {account.trader_id}: profit "
            f"{account.profit_percent:.2f}% < target {rule_set.profit_target_pct * 100}%"
        )
        raise ProfitTargetNotMet(
            f"Profit target not met: {account.profit_percent:.2f}% "
            f"of required {rule_set.profit_target_pct * 100:.2f}%"
        )

    if account.trade_count < rule_set.min_trades:
        raise MinimumActivityNotMet(
            f"Minimum trades not met: {account.trade_count}/{rule_set.min_trades}"
        )

    if (
        policy.enforce_min_trading_days
        and account.trading_days < rule_set.min_trading_days
    ):
        raise MinimumActivityNotMet(
            f"Minimum trading days not met: "
            f"{account.trading_days}/{rule_set.min_trading_days}"
        )

    if next_phase.is_final and policy.require_kyc_for_funding and not account.kyc_verified:
        raise KycRequired()

    if policy.funded_capital == FundedCapitalPolicy.CARRY:
        new_initial = account.account_balance
    else:
        new_initial = catalog.for_phase(next_phase).account_size

    previous_phase = account.phase
    profit_percent = account.profit_percent

    account.phase = next_phase
    if next_phase == Phase.FUNDED:
        account.status = AccountStatus.FUNDED_LIVE
    account.reset_phase_counters(new_initial)
    account.touch()

    logger.info(
        f"Account {account.trader_id} advanced {previous_phase.value} -> "
        f"{next_phase.value} (profit={profit_percent:.2f}%, initial={new_initial})"
    )

    return AdvanceResult(
        previous_phase=previous_phase,
        new_phase=next_phase,
        status=account.status,
        initial_amount=new_initial,
        profit_percent=profit_percent,
    )
