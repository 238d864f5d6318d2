"""
バックエンド DB 連携モジュール。

- config: system1 / system2 の接続設定（ホスト, ユーザー, DB 名, プール設定等）
- tables: notification_check / api_logs のテーブル定義
- client: コネクションプールとトランザクション単位（UnitOfWork）
- registry: アプリ全体で使うバックエンドクライアントの集合
"""

from .client import (  # noqa: F401
    BackendClient,
    BackendClientError,
    BackendTransactionError,
    BackendUnavailableError,
    UnitOfWork,
)
from .config import BackendSettings, get_backend_settings  # noqa: F401
from .registry import BackendRegistry, UnknownBackendError, build_backend_registry  # noqa: F401
