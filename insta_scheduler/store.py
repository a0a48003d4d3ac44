from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger("insta-scheduler")

ACCOUNTS = "accounts"
SCHEDULE = "schedule"

DEFAULTS: dict[str, Any] = {
    ACCOUNTS: {},
    SCHEDULE: {"times": []},
}


class JsonStore:
    """Two flat JSON documents on disk. Reads fall back to defaults, writes never raise.

    There is no locking; concurrent writers race and the last one wins.
    """

    def __init__(self, accounts_path: Path, schedule_path: Path) -> None:
        self._paths = {ACCOUNTS: Path(accounts_path), SCHEDULE: Path(schedule_path)}

    def path_for(self, key: str) -> Path:
        return self._paths[key]

    def default_for(self, key: str) -> Any:
        return copy.deepcopy(DEFAULTS[key])

    def load(self, key: str) -> Any:
        path = self.path_for(key)
        default = self.default_for(key)
        try:
            if not path.exists():
                return default
            text = path.read_text(encoding="utf-8")
            if not text.strip():
                return default
            document = json.loads(text)
        except (OSError, ValueError):
            logger.exception("store_read_fail key=%s path=%s", key, path)
            return default
        if not isinstance(document, type(default)):
            logger.warning(
                "store_read_fail key=%s path=%s reason=unexpected_type type=%s",
                key,
                path,
                type(document).__name__,
            )
            return default
        return document

    def save(self, key: str, document: Any) -> bool:
        path = self.path_for(key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False)
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError):
            logger.exception("store_write_fail key=%s path=%s", key, path)
            return False
        logger.info("store_write_success key=%s path=%s bytes=%s", key, path, len(text.encode("utf-8")))
        return True

    def ensure_files(self) -> None:
        for key in (ACCOUNTS, SCHEDULE):
            if not self.path_for(key).exists():
                self.save(key, self.default_for(key))

    def file_info(self, key: str) -> dict[str, Any]:
        path = self.path_for(key)
        try:
            exists = path.is_file()
            size = path.stat().st_size if exists else 0
        except OSError:
            logger.exception("store_stat_fail key=%s path=%s", key, path)
            exists, size = False, 0
        return {"path": str(path), "exists": exists, "bytes": size}

    def load_accounts(self) -> dict[str, Any]:
        return self.load(ACCOUNTS)

    def save_accounts(self, accounts: dict[str, Any]) -> bool:
        return self.save(ACCOUNTS, accounts)

    def load_schedule(self) -> list[Any]:
        times = self.load(SCHEDULE).get("times")
        return times if isinstance(times, list) else []

    def save_schedule(self, times: list[Any]) -> bool:
        return self.save(SCHEDULE, {"times": list(times)})


__all__ = ["ACCOUNTS", "SCHEDULE", "JsonStore"]
