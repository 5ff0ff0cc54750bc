"""
アプリ設定の運用環境への反映 (デプロイ) 完了待ち
"""

import time
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_MS = 1000


class DeployStatus(str, Enum):
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"
    CANCEL = "CANCEL"
    # 待機回数の上限に達したことを示す。kintone からは返らない
    TIMEOUT = "TIMEOUT"

    @classmethod
    def from_remote(cls, value: Any) -> Optional["DeployStatus"]:
        """kintone が返すステータス文字列を変換する。未知の値や TIMEOUT は None"""
        if value == cls.TIMEOUT.value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_terminal(self) -> bool:
        return self in (DeployStatus.SUCCESS, DeployStatus.FAIL, DeployStatus.CANCEL)

    @property
    def icon(self) -> str:
        return STATUS_ICONS[self]


STATUS_ICONS = {
    DeployStatus.PROCESSING: "⏳",
    DeployStatus.SUCCESS: "✅",
    DeployStatus.FAIL: "❌",
    DeployStatus.CANCEL: "🚫",
    DeployStatus.TIMEOUT: "⌛",
}
UNKNOWN_STATUS_ICON = "❓"


class WaitOutcome:
    """デプロイ完了待ちの結果。success は status が SUCCESS のときだけ True"""

    __slots__ = ("_status",)

    def __init__(self, status: DeployStatus):
        self._status = DeployStatus(status)

    @property
    def status(self) -> DeployStatus:
        return self._status

    @property
    def success(self) -> bool:
        return self._status is DeployStatus.SUCCESS

    def to_dict(self) -> Dict[str, Union[bool, str]]:
        return {"success": self.success, "status": self._status.value}

    def __eq__(self, other):
        if not isinstance(other, WaitOutcome):
            return NotImplemented
        return self._status is other._status

    def __hash__(self):
        return hash(self._status)

    def __repr__(self):
        return f"WaitOutcome(success={self.success}, status='{self._status.value}')"


class DeployWaitCancelled(Exception):
    """cancel_event によってデプロイ完了待ちが中断された場合の例外"""

    def __init__(self, app_id, attempts: int):
        self.app_id = app_id
        self.attempts = attempts
        super().__init__(f"アプリ {app_id} のデプロイ完了待ちが {attempts} 回目の確認後に中断されました")


def extract_status(report: Optional[Dict[str, Any]]) -> Any:
    """getDeployStatus のレスポンスから先頭アプリのステータスを取り出す"""
    apps = (report or {}).get("apps") or []
    if not apps or not isinstance(apps[0], dict):
        return None
    return apps[0].get("status")


def wait_for_deploy(client, app_id, max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                    interval_ms: int = DEFAULT_INTERVAL_MS,
                    sleep: Callable[[float], Any] = time.sleep,
                    cancel_event: Optional[threading.Event] = None) -> WaitOutcome:
    """
    デプロイが完了するまでステータスを確認し続ける

    client.get_deploy_status([app_id]) を最大 max_attempts 回呼び出し、
    SUCCESS / FAIL / CANCEL のいずれかになった時点で結果を返す。
    それ以外 (PROCESSING や未知の値) の場合は interval_ms 待ってから再確認する。
    上限に達した場合は TIMEOUT を返す。

    client が送出した例外 (通信エラー・認証エラーなど) は捕捉せずにそのまま送出する。
    cancel_event がセットされた場合は DeployWaitCancelled を送出する。
    """
    if max_attempts <= 0:
        logger.debug(f"max_attempts={max_attempts} のためステータスを確認せずに終了します")
        return WaitOutcome(DeployStatus.TIMEOUT)

    interval = interval_ms / 1000.0
    for attempt in range(1, max_attempts + 1):
        raw_status = extract_status(client.get_deploy_status([app_id]))
        status = DeployStatus.from_remote(raw_status)
        logger.debug(f"アプリ {app_id} のデプロイ状況 ({attempt}/{max_attempts}): {raw_status}")

        if status is not None and status.is_terminal:
            return WaitOutcome(status)

        if status is None:
            logger.warning(f"アプリ {app_id} の不明なデプロイ状況です。確認を続けます: {raw_status!r}")

        if attempt == max_attempts:
            break

        if cancel_event is not None:
            if cancel_event.wait(interval):
                raise DeployWaitCancelled(app_id, attempt)
        else:
            sleep(interval)

    logger.warning(f"アプリ {app_id} のデプロイが {max_attempts} 回の確認で完了しませんでした")
    return WaitOutcome(DeployStatus.TIMEOUT)
