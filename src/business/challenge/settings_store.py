"""
Settings Store - 配置快照管理

持有不可变的 ChallengeSettings 快照。读取无需加锁；
管理员更新时基于字典形式合并，构造新快照后整体替换 (copy-and-swap)，
进行中的评估始终看到一致的旧快照。
"""

import logging
from threading import Lock
from typing import Any

from src.business.challenge.config.challenge_config import merge_overrides
from src.business.challenge.models.rules import ChallengeSettings, Phase

logger = logging.getLogger(__name__)


class SettingsStore:
    """配置快照持有者

    Usage:
        store = SettingsStore(config.settings)
        snapshot = store.snapshot()
        store.update_admin({"commission_pct": 25})
    """

    def __init__(self, settings: ChallengeSettings | None = None) -> None:
        self._settings = settings or ChallengeSettings()
        self._lock = Lock()

    def snapshot(self) -> ChallengeSettings:
        """当前快照"""
        return self._settings

    def replace(self, settings: ChallengeSettings) -> ChallengeSettings:
        """整体替换快照"""
        with self._lock:
            self._settings = settings
        return settings

    def update(self, overrides: dict[str, Any]) -> ChallengeSettings:
        """部分更新 (rules / admin / policy 节)

        新快照构造失败 (ConfigError) 时保留旧快照。
        """
        with self._lock:
            merged = merge_overrides(self._settings.to_dict(), overrides)
            new_settings = ChallengeSettings.from_dict(merged)
            self._settings = new_settings
        logger.info(f"Settings updated: {', '.join(sorted(overrides))}")
        return new_settings

    def update_rules(self, phase: Phase | str, overrides: dict[str, Any]) -> ChallengeSettings:
        """更新单个阶段规则"""
        return self.update({"rules": {Phase.parse(phase).value: overrides}})

    def update_admin(self, overrides: dict[str, Any]) -> ChallengeSettings:
        """更新平台设置"""
        return self.update({"admin": overrides})

    def update_policy(self, overrides: dict[str, Any]) -> ChallengeSettings:
        """更新评估策略"""
        return self.update({"policy": overrides})
