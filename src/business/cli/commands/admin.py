"""
Admin Command - 平台管理命令

命令:
- admin settings: 显示平台设置与规则目录
- admin users: 列出所有交易员
- admin update-rules: 更新单阶段规则
- admin update-settings: 更新平台设置

更新先在内存快照上校验，成功后写入 <storage_path>/settings.yaml。

使用示例:
=========

fundctl admin update-rules eval1 --set profit_target_pct=0.08 --set min_trades=3
fundctl admin update-settings --commission 25 --min-withdrawal 500
"""

import logging

import click

from src.business.challenge.models.errors import InvalidRequest
from src.business.challenge.models.rules import Phase
from src.business.cli.context import CliState, echo_json, handle_errors

logger = logging.getLogger(__name__)


def _parse_assignments(assignments: tuple[str, ...]) -> dict[str, str]:
    """解析 key=value 列表"""
    result: dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise InvalidRequest(f"Expected key=value, got {item!r}")
        result[key.strip()] = value.strip()
    return result


@click.group()
def admin() -> None:
    """平台管理 - 规则目录与平台设置"""
    pass


@admin.command()
@click.option("--json", "as_json", is_flag=True, help="JSON 格式输出")
@click.pass_obj
@handle_errors
def settings(state: CliState, as_json: bool) -> None:
    """显示平台设置与规则目录"""
    snapshot = state.service.settings.snapshot()
    if as_json:
        echo_json(snapshot.to_dict())
        return

    admin_settings = snapshot.admin
    click.echo("\n===== Platform Settings =====")
    click.echo(f"Company: {admin_settings.company_name}")
    click.echo(f"Commission: {admin_settings.commission_pct}%")
    click.echo(f"Min withdrawal: {admin_settings.min_withdrawal}")
    click.echo(f"Processing days: {admin_settings.processing_days}")
    click.echo(f"Funded capital policy: {snapshot.policy.funded_capital.value}")
    for phase in Phase:
        rule_set = snapshot.catalog.for_phase(phase)
        click.echo(f"\n[{phase.value}] {rule_set.name}")
        click.echo(f"  account size: {rule_set.account_size}")
        click.echo(f"  profit target: {rule_set.profit_target_pct * 100}%")
        click.echo(
            f"  drawdown: daily {rule_set.max_daily_drawdown_pct * 100}% / "
            f"total {rule_set.max_total_drawdown_pct * 100}%"
        )
        click.echo(
            f"  activity: {rule_set.min_trades} trades, {rule_set.min_trading_days} days"
        )
        if rule_set.profit_share_pct is not None:
            click.echo(f"  profit share: {rule_set.profit_share_pct}%")
    click.echo("=============================\n")


@admin.command()
@click.option("--json", "as_json", is_flag=True, help="JSON 格式输出")
@click.pass_obj
@handle_errors
def users(state: CliState, as_json: bool) -> None:
    """列出所有交易员"""
    accounts = state.service.list_accounts()
    if as_json:
        echo_json([a.to_dict() for a in accounts])
        return

    if not accounts:
        click.echo("No users registered")
        return
    for account in accounts:
        click.echo(
            f"{account.trader_id:<16} {account.phase.value:<8} {account.status.value:<12} "
            f"balance={account.account_balance} trades={account.trade_count}"
        )


@admin.command("update-rules")
@click.argument("phase", type=click.Choice([p.value for p in Phase], case_sensitive=False))
@click.option("--set", "assignments", multiple=True, required=True, help="key=value")
@click.pass_obj
@handle_errors
def update_rules(state: CliState, phase: str, assignments: tuple[str, ...]) -> None:
    """更新单阶段规则"""
    overrides = _parse_assignments(assignments)
    snapshot = state.service.settings.update_rules(phase, overrides)
    state.config.save_overrides({"rules": {phase: snapshot.catalog.for_phase(phase).to_dict()}})
    click.echo(f"Rules updated for {phase}: {', '.join(sorted(overrides))}")


@admin.command("update-settings")
@click.option("--company-name", default=None, help="平台名称")
@click.option("--commission", type=str, default=None, help="佣金百分比")
@click.option("--min-withdrawal", type=str, default=None, help="最低出金额")
@click.option("--processing-days", type=int, default=None, help="出金处理天数")
@click.pass_obj
@handle_errors
def update_settings(
    state: CliState,
    company_name: str | None,
    commission: str | None,
    min_withdrawal: str | None,
    processing_days: int | None,
) -> None:
    """更新平台设置"""
    overrides = {
        "company_name": company_name,
        "commission_pct": commission,
        "min_withdrawal": min_withdrawal,
        "processing_days": processing_days,
    }
    snapshot = state.service.settings.update_admin(overrides)
    state.config.save_overrides({"admin": snapshot.admin.to_dict()})
    click.echo("Settings updated")
