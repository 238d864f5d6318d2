"""
/work/notifyme 機能モジュール。

- schemas: リクエスト / レスポンスの Pydantic モデル
- validator: リクエストボディ検証（違反はすべて集めて返す）
- service: system1 / system2 へのトランザクション付きファンアウト
- router: /work/notifyme エンドポイント
"""

from .schemas import (  # noqa: F401
    BackendErrorResult,
    BackendSuccessResult,
    NotificationRequest,
    NotifyResponse,
)
from .service import NotifyService  # noqa: F401
from .validator import ValidationError, validate_notification_request  # noqa: F401
