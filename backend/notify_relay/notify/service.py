# backend/notify_relay/notify/service.py

"""
通知リクエストを各バックエンドへファンアウトするサービス層。

責務:
- target_system から書き込み対象のバックエンドを決める
- バックエンドごとに独立したトランザクションで
  notification_check → api_logs の順に INSERT する
- 1 系統の失敗は他の系統に影響させず、結果を系統ごとに集約する
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from notify_relay.backends import BackendRegistry, BackendTransactionError

from .schemas import (
    BackendErrorResult,
    BackendResult,
    BackendSuccessResult,
    NotificationRequest,
    NotifyResponse,
)

logger = logging.getLogger(__name__)

NOTIFY_ENDPOINT = "/work/notifyme"
NOTIFY_METHOD = "POST"
NOTIFY_STATUS_CODE = 200
NOTIFY_SUCCESS_PAYLOAD = {"success": True}


def serialize_payload(payload: Any) -> str:
    """api_logs に保存する JSON 文字列を作る（区切り文字の空白なし）。"""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class NotifyService:
    """
    BackendRegistry を利用して、1 リクエストを複数バックエンドに書き込むサービス。

    - バックエンドは target_set() の順に 1 つずつ処理する
    - INSERT / COMMIT の失敗はその系統の "error" 結果になり、処理は継続する
    - コネクション取得自体の失敗（BackendUnavailableError）はここでは捕捉せず、
      リクエスト全体の失敗として呼び出し元に伝播させる
    """

    def __init__(
        self,
        registry: BackendRegistry,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._registry = registry
        self._clock = clock or datetime.now

    # ---- 公開 API ------------------------------------------------------

    def notify(self, request: NotificationRequest, raw_body: Any) -> NotifyResponse:
        return NotifyResponse(results=self.fan_out(request, raw_body))

    def fan_out(self, request: NotificationRequest, raw_body: Any) -> List[BackendResult]:
        """
        target_set() の各バックエンドに書き込み、系統ごとの結果を順番通りに返す。

        :param request: 検証済みのリクエスト
        :param raw_body: 受信したままのリクエストボディ（api_logs.request_payload 用）
        """
        request_payload = serialize_payload(raw_body)

        results: List[BackendResult] = []
        for system_id in request.target_set():
            results.append(self._write_to_backend(system_id, request, request_payload))
        return results

    # ---- 内部: 1 系統分のトランザクション ------------------------------

    def _write_to_backend(
        self,
        system_id: str,
        request: NotificationRequest,
        request_payload: str,
    ) -> BackendResult:
        backend = self._registry.get(system_id)
        name = backend.name

        with backend.acquire() as unit:
            try:
                unit.begin()
                now = self._clock()

                unit.insert_notification_check(request.dm_id, request.notify_check, now)
                log_id = unit.insert_api_log(
                    endpoint=NOTIFY_ENDPOINT,
                    method=NOTIFY_METHOD,
                    request_payload=request_payload,
                    response_payload=serialize_payload(NOTIFY_SUCCESS_PAYLOAD),
                    status_code=NOTIFY_STATUS_CODE,
                    at=now,
                )

                unit.commit()
            except BackendTransactionError as exc:
                unit.rollback()
                logger.error(
                    "Error in %s",
                    name,
                    extra={"fields": {"system": name, "error": exc.message}},
                )
                return BackendErrorResult(system=name, error=exc.message)

        return BackendSuccessResult(system=name, log_id=log_id)
