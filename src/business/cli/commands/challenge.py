"""
Challenge Command - 交易员考核命令

命令:
- challenge register: 注册交易员
- challenge pay: 付款确认 (激活考核)
- challenge kyc: 更新 KYC 状态
- challenge trade: 记录一笔已平仓交易
- challenge advance: 阶段晋级
- challenge withdraw: 申请出金
- challenge status: 查看考核进度

使用示例:
=========

fundctl challenge register T001 --name Alice --email alice@example.com
fundctl challenge pay T001
fundctl challenge trade T001 -s EURUSD --side buy -q 1000 --entry 1.10 --exit 1.12
fundctl challenge trade T001 -s EURUSD -q 1000 --entry 1.10 --exit 1.12 -t 2025-03-04T15:30:00
fundctl challenge advance T001
fundctl challenge status T001 --json
"""

import logging

import click

from src.business.challenge.models.account import TradeInput, TradeSide
from src.business.challenge.models.withdrawal import BankDetails
from src.business.cli.context import CliState, echo_json, handle_errors

logger = logging.getLogger(__name__)


@click.group()
def challenge() -> None:
    """交易员考核 - 交易记录、晋级与出金

    \b
    阶段: eval1 → eval2 → funded
    """
    pass


@challenge.command()
@click.argument("trader_id")
@click.option("--name", required=True, help="交易员姓名")
@click.option("--email", required=True, help="邮箱")
@click.option("--phone", default=None, help="电话")
@click.pass_obj
@handle_errors
def register(state: CliState, trader_id: str, name: str, email: str, phone: str | None) -> None:
    """注册交易员"""
    account = state.service.register(trader_id, name=name, email=email, phone=phone)
    click.echo(f"Registered {account.trader_id} ({account.phase.value})")


@challenge.command()
@click.argument("trader_id")
@click.option("--amount", type=str, default=None, help="初始资金 (默认 EVAL1 account_size)")
@click.pass_obj
@handle_errors
def pay(state: CliState, trader_id: str, amount: str | None) -> None:
    """付款确认，激活考核"""
    account = state.service.confirm_payment(trader_id, amount=amount)
    click.echo(
        f"Challenge activated for {account.trader_id}: "
        f"initial amount {account.initial_amount}"
    )


@challenge.command()
@click.argument("trader_id")
@click.option("--verified/--unverified", default=True, help="KYC 审核结果")
@click.pass_obj
@handle_errors
def kyc(state: CliState, trader_id: str, verified: bool) -> None:
    """更新 KYC 状态"""
    account = state.service.set_kyc_status(trader_id, verified)
    click.echo(f"KYC for {account.trader_id}: {'verified' if account.kyc_verified else 'unverified'}")


@challenge.command()
@click.argument("trader_id")
@click.option("--symbol", "-s", required=True, help="交易标的")
@click.option(
    "--side",
    type=click.Choice([s.value for s in TradeSide], case_sensitive=False),
    default=TradeSide.BUY.value,
    help="买卖方向",
)
@click.option("--quantity", "-q", required=True, type=str, help="数量")
@click.option("--entry", "entry_price", required=True, type=str, help="开仓价")
@click.option("--exit", "exit_price", required=True, type=str, help="平仓价")
@click.option("--broker", default="", help="券商")
@click.option("--timestamp", "-t", default=None, help="平仓时间 (ISO 8601，默认当前时间)")
@click.pass_obj
@handle_errors
def trade(
    state: CliState,
    trader_id: str,
    symbol: str,
    side: str,
    quantity: str,
    entry_price: str,
    exit_price: str,
    broker: str,
    timestamp: str | None,
) -> None:
    """记录一笔已平仓交易"""
    trade_input = TradeInput.from_dict(
        {
            "symbol": symbol,
            "side": side,
            "quantity": quantity,
            "entry_price": entry_price,
            "exit_price": exit_price,
            "broker": broker,
            "timestamp": timestamp,
        }
    )
    recorded = state.service.record_trade(trader_id, trade_input)
    account = state.service.get_account(trader_id)
    click.echo(
        f"Trade {recorded.trade_id}: {recorded.symbol} pnl={recorded.pnl} "
        f"({recorded.pnl_percent:.2f}%)"
    )
    click.echo(f"Balance: {account.account_balance}  Cumulative P&L: {account.cumulative_pnl}")
    if account.is_breached:
        click.echo(f"⛔ Account breached: {account.breach_reason}")


@challenge.command()
@click.argument("trader_id")
@click.pass_obj
@handle_errors
def advance(state: CliState, trader_id: str) -> None:
    """晋级到下一阶段"""
    result = state.service.advance_phase(trader_id)
    click.echo(
        f"Phase advanced: {result.previous_phase.value} -> {result.new_phase.value} "
        f"(initial amount {result.initial_amount})"
    )


@challenge.command()
@click.argument("trader_id")
@click.option("--bank-holder", default=None, help="账户持有人")
@click.option("--bank-account", default=None, help="银行账号")
@click.option("--bank-ifsc", default=None, help="IFSC 代码")
@click.option("--bank-name", default=None, help="银行名称")
@click.pass_obj
@handle_errors
def withdraw(
    state: CliState,
    trader_id: str,
    bank_holder: str | None,
    bank_account: str | None,
    bank_ifsc: str | None,
    bank_name: str | None,
) -> None:
    """申请出金 (仅 funded 阶段)"""
    withdrawal = state.service.request_withdrawal(
        trader_id,
        BankDetails(
            bank_holder=bank_holder,
            bank_account=bank_account,
            bank_ifsc=bank_ifsc,
            bank_name=bank_name,
        ),
    )
    click.echo(
        f"Withdrawal {withdrawal.withdrawal_id} submitted: {withdrawal.amount} "
        f"(processing in {withdrawal.processing_days} days)"
    )


@challenge.command()
@click.argument("trader_id")
@click.option("--json", "as_json", is_flag=True, help="JSON 格式输出")
@click.pass_obj
@handle_errors
def status(state: CliState, trader_id: str, as_json: bool) -> None:
    """查看考核进度"""
    summary = state.service.summary(trader_id)
    if as_json:
        echo_json(summary)
        return

    click.echo(f"\n===== {summary['trader_id']} =====")
    click.echo(f"Phase: {summary['phase']} ({summary['phase_name']})")
    click.echo(f"Status: {summary['status'].upper()}")
    click.echo(f"Balance: {summary['account_balance']} (initial {summary['initial_amount']})")
    click.echo(
        f"Profit: {summary['profit_percent']}% / target {summary['profit_target_percent']}%"
    )
    click.echo(
        f"Peak drawdown: {summary['peak_drawdown']} (limit {summary['loss_limit']})"
    )
    click.echo(f"Trades: {summary['trades']}/{summary['min_trades']}")
    click.echo(f"Trading days: {summary['trading_days']}/{summary['min_trading_days']}")
    if summary["breach_reason"]:
        click.echo(f"Breach reason: {summary['breach_reason']}")
    click.echo("=" * (12 + len(summary["trader_id"])) + "\n")
