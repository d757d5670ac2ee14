"""
Challenge Configuration - 考核配置

规则目录、平台设置、评估策略与存储路径的唯一配置源。

配置来源 (优先级高→低):
1. 管理员覆盖文件 <storage_path>/settings.yaml (admin 命令写入)
2. 环境变量 (前缀: CHALLENGE_)
3. YAML 主配置 config/challenge/challenge.yaml
4. dataclass 默认值

配置文件结构:
    storage:
      path: data/challenge
    rules:
      eval1: {account_size: 50000, profit_target_pct: 0.10, ...}
      eval2: {...}
      funded: {...}
    admin:
      commission_pct: 20
      min_withdrawal: 1000
    policy:
      funded_capital: reset
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.business.challenge.models.errors import ConfigError
from src.business.challenge.models.rules import ChallengeSettings, to_bool

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parents[4] / "config" / "challenge" / "challenge.yaml"
OVERRIDES_FILENAME = "settings.yaml"

# 环境变量 → (节, 键)
_ENV_KEYS: dict[str, tuple[str, str]] = {
    "CHALLENGE_COMMISSION_PCT": ("admin", "commission_pct"),
    "CHALLENGE_MIN_WITHDRAWAL": ("admin", "min_withdrawal"),
    "CHALLENGE_PROCESSING_DAYS": ("admin", "processing_days"),
    "CHALLENGE_COMPANY_NAME": ("admin", "company_name"),
    "CHALLENGE_FUNDED_CAPITAL": ("policy", "funded_capital"),
    "CHALLENGE_ENFORCE_DAILY_DRAWDOWN": ("policy", "enforce_daily_drawdown"),
    "CHALLENGE_ENFORCE_MIN_TRADING_DAYS": ("policy", "enforce_min_trading_days"),
    "CHALLENGE_REQUIRE_KYC": ("policy", "require_kyc_for_funding"),
}

_BOOL_KEYS = {
    "enforce_daily_drawdown",
    "enforce_min_trading_days",
    "require_kyc_for_funding",
}


def merge_overrides(
    base: dict[str, Any],
    overrides: dict[str, Any],
) -> dict[str, Any]:
    """递归合并部分更新

    - 嵌套 dict：递归合并
    - None：视为未提供，保留原值
    - 其他类型：直接覆盖

    Returns:
        合并后的新字典 (不修改原字典)
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_overrides(result[key], value)
        else:
            result[key] = value
    return result


def _env_overrides() -> dict[str, Any]:
    """从环境变量收集覆盖值"""
    overrides: dict[str, Any] = {}
    for env_key, (section, key) in _ENV_KEYS.items():
        val = os.getenv(env_key)
        if val is None:
            continue
        if key in _BOOL_KEYS:
            value: Any = to_bool(val, env_key)
        else:
            value = val
        overrides.setdefault(section, {})[key] = value
    return overrides


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


@dataclass
class ChallengeConfig:
    """考核配置

    示例:
        config = ChallengeConfig.load()
        rule_set = config.settings.catalog.for_phase(Phase.EVAL1)

        config = ChallengeConfig.from_dict({"admin": {"commission_pct": 25}})
    """

    storage_path: str = "data/challenge"
    settings: ChallengeSettings = field(default_factory=ChallengeSettings)

    @property
    def overrides_path(self) -> Path:
        """管理员覆盖文件路径"""
        return Path(self.storage_path) / OVERRIDES_FILENAME

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChallengeConfig":
        """从字典创建配置"""
        storage = data.get("storage") or {}
        return cls(
            storage_path=str(storage.get("path", cls.storage_path)),
            settings=ChallengeSettings.from_dict(data),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ChallengeConfig":
        """从 YAML 文件加载配置"""
        return cls.from_dict(_read_yaml(Path(path)))

    @classmethod
    def load(cls, config_file: str | Path | None = None) -> "ChallengeConfig":
        """加载配置

        YAML 不存在时使用 dataclass 默认值，再依次叠加环境变量与管理员覆盖文件。
        """
        path = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        data = cls().to_dict()
        if path.exists():
            data = merge_overrides(data, _read_yaml(path))

        data = merge_overrides(data, _env_overrides())

        storage_path = os.getenv("CHALLENGE_STORAGE_PATH")
        if storage_path:
            data = merge_overrides(data, {"storage": {"path": storage_path}})

        config = cls.from_dict(data)
        if config.overrides_path.exists():
            logger.debug(f"Applying admin overrides from {config.overrides_path}")
            data = merge_overrides(data, _read_yaml(config.overrides_path))
            config = cls.from_dict(data)
        return config

    def save_overrides(self, overrides: dict[str, Any]) -> None:
        """合并写入管理员覆盖文件"""
        path = self.overrides_path
        existing = _read_yaml(path) if path.exists() else {}
        merged = merge_overrides(existing, overrides)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(merged, f, allow_unicode=True, sort_keys=False)
        logger.info(f"Admin overrides saved to {path}")

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        data = self.settings.to_dict()
        data["storage"] = {"path": self.storage_path}
        return data
