"""Challenge Configuration - 考核配置"""

from src.business.challenge.config.challenge_config import (
    ChallengeConfig,
    merge_overrides,
)

__all__ = [
    "ChallengeConfig",
    "merge_overrides",
]
