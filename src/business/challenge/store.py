"""
Account Store - 账户存储

使用 JSON 文件持久化账户状态，每个交易员一个文档。

文件结构:
    data/challenge/
    ├── accounts/
    │   ├── trader_001.json
    │   └── trader_002.json
    └── index.json  # 账户索引 (阶段、状态、更新时间)

写入先落到同目录临时文件，再 os.replace 覆盖目标，读取方不会看到半写文件。
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any

from src.business.challenge.models.account import AccountState
from src.business.challenge.models.errors import InvalidRequest

logger = logging.getLogger(__name__)

_TRADER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.@-]+$")


def _write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """写入临时文件后原子替换目标文件"""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except Exception:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class AccountStore:
    """账户存储

    Usage:
        store = AccountStore("data/challenge")
        store.save(account)
        account = store.get("trader_001")
    """

    def __init__(self, storage_path: str | Path = "data/challenge") -> None:
        """初始化账户存储

        Args:
            storage_path: 存储根目录
        """
        self._base_path = Path(storage_path)
        self._accounts_path = self._base_path / "accounts"
        self._index_path = self._base_path / "index.json"
        self._accounts_path.mkdir(parents=True, exist_ok=True)
        self._index_lock = Lock()

    def _get_account_path(self, trader_id: str) -> Path:
        if not _TRADER_ID_PATTERN.match(trader_id) or trader_id in (".", ".."):
            raise InvalidRequest(f"Invalid trader id: {trader_id!r}")
        return self._accounts_path / f"{trader_id}.json"

    def save(self, account: AccountState) -> None:
        """保存账户文档"""
        path = self._get_account_path(account.trader_id)
        try:
            _write_json_atomic(path, account.to_dict())
            self._update_index(account)
            logger.debug(f"Account saved: {account.trader_id} -> {path}")
        except OSError as e:
            logger.error(f"Failed to save account {account.trader_id}: {e}")
            raise

    def get(self, trader_id: str) -> AccountState | None:
        """获取账户，不存在返回 None"""
        path = self._get_account_path(trader_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return AccountState.from_dict(data)

    def exists(self, trader_id: str) -> bool:
        return self._get_account_path(trader_id).exists()

    def delete(self, trader_id: str) -> bool:
        """删除账户文档"""
        path = self._get_account_path(trader_id)
        if not path.exists():
            return False
        path.unlink()
        with self._index_lock:
            index = self._read_index()
            index.get("accounts", {}).pop(trader_id, None)
            self._write_index(index)
        logger.info(f"Account deleted: {trader_id}")
        return True

    def list_all(self) -> list[AccountState]:
        """列出全部账户 (按注册时间排序)"""
        results = []
        for account_file in sorted(self._accounts_path.glob("*.json")):
            try:
                with open(account_file, "r", encoding="utf-8") as f:
                    results.append(AccountState.from_dict(json.load(f)))
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Failed to load account {account_file}: {e}")
        results.sort(key=lambda a: a.registered_at)
        return results

    def _read_index(self) -> dict[str, Any]:
        if not self._index_path.exists():
            return {}
        try:
            with open(self._index_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Account index unreadable, rebuilding: {e}")
            return {}

    def _write_index(self, index: dict[str, Any]) -> None:
        index["updated_at"] = datetime.now().isoformat()
        _write_json_atomic(self._index_path, index)

    def _update_index(self, account: AccountState) -> None:
        with self._index_lock:
            index = self._read_index()
            index.setdefault("accounts", {})[account.trader_id] = {
                "trader_id": account.trader_id,
                "phase": account.phase.value,
                "status": account.status.value,
                "updated_at": account.updated_at.isoformat(),
            }
            self._write_index(index)
