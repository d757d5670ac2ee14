"""
CLI Context - 命令行共享工具

- 加载 .env 与考核配置
- 构建 ChallengeService
- 统一错误输出
"""

import functools
import json
import logging
import sys
from typing import Any, Callable

import click
from dotenv import load_dotenv

from src.business.challenge.config.challenge_config import ChallengeConfig
from src.business.challenge.models.errors import ChallengeError
from src.business.challenge.service import ChallengeService

logger = logging.getLogger(__name__)


class CliState:
    """命令行运行状态 (挂在 click ctx.obj 上)"""

    def __init__(self, config_file: str | None = None) -> None:
        self.config_file = config_file
        self._config: ChallengeConfig | None = None
        self._service: ChallengeService | None = None

    @property
    def config(self) -> ChallengeConfig:
        if self._config is None:
            load_dotenv()
            self._config = ChallengeConfig.load(self.config_file)
        return self._config

    @property
    def service(self) -> ChallengeService:
        if self._service is None:
            self._service = ChallengeService.from_config(self.config)
        return self._service


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """捕获 ChallengeError，输出错误码并以状态码 1 退出"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ChallengeError as e:
            logger.debug(f"{func.__name__} failed: {e.code}")
            click.echo(f"Error [{e.code}]: {e.message}", err=True)
            sys.exit(1)

    return wrapper


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))
