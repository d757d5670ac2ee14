"""
Business Layer CLI - 业务层命令行工具

提供命令：
- challenge: 交易员考核 (注册、交易、晋级、出金)
- admin: 平台管理 (规则目录、平台设置)
"""

from src.business.cli.main import cli

__all__ = ["cli"]
