"""
CLI Commands - 命令行子命令
"""

from src.business.cli.commands.admin import admin
from src.business.cli.commands.challenge import challenge

__all__ = ["challenge", "admin"]
