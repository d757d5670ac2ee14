"""
CLI Main Entry Point - 命令行主入口

使用 Click 库构建命令行工具。
"""

import logging

import click

from src.business.cli.commands.admin import admin
from src.business.cli.commands.challenge import challenge
from src.business.cli.context import CliState


@click.group()
@click.version_option(version="0.1.0", prog_name="fundctl")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="考核配置文件 (默认 config/challenge/challenge.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="显示详细日志")
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, verbose: bool) -> None:
    """资金账户考核系统 - 命令行工具

    记录交易、检测爆仓、阶段晋级与出金。
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = CliState(config_file=config_file)


# 注册子命令
cli.add_command(challenge)
cli.add_command(admin)


if __name__ == "__main__":
    cli()
