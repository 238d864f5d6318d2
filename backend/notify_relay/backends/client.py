# backend/notify_relay/backends/client.py

"""
バックエンド DB 1 系統分のクライアントモジュール。

- BackendClient: エンジン（コネクションプール）を所有し、UnitOfWork を払い出す
- UnitOfWork: プールから借りた 1 本のコネクション上のトランザクション

SQLAlchemy / ドライバの例外はここで BackendClientError 系に変換し、
上位レイヤー（notify.service）には SQLAlchemy を意識させない。
トランザクション内で発生した例外は種類を問わず BackendTransactionError になる。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine, RootTransaction
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .config import BackendSettings
from .tables import api_logs, metadata, notification_check


class BackendClientError(Exception):
    """バックエンドクライアント全般の基底例外。"""

    def __init__(self, system_id: str, message: str) -> None:
        super().__init__(message)
        self.system_id = system_id
        self.message = message


class BackendUnavailableError(BackendClientError):
    """コネクションを取得できなかった場合の例外（トランザクション開始前）。"""


class BackendTransactionError(BackendClientError):
    """トランザクション内の begin / insert / commit / rollback に失敗した場合の例外。"""


def _error_message(exc: Exception) -> str:
    """
    ドライバが返した元のエラーメッセージを取り出す。

    SQLAlchemy の str(exc) は SQL 文とパラメータまで含むため、
    レスポンスに載せるのはドライバ側のメッセージだけにする。
    PyMySQL の例外は args が (errno, message) の形になっている。
    """
    orig: Any = exc.orig if isinstance(exc, DBAPIError) else None
    if orig is None:
        return str(exc)

    args = getattr(orig, "args", ())
    if len(args) >= 2 and isinstance(args[0], int) and isinstance(args[1], str):
        return args[1]
    return str(orig)


def build_engine(settings: BackendSettings) -> Engine:
    """
    設定値からバックエンド専用のエンジン（= 専用コネクションプール）を生成する。
    """
    url = settings.sqlalchemy_url()
    kwargs: dict[str, Any] = {"future": True}

    # SQLite はプール種別が異なり pool_size / pool_timeout を受け付けない
    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.pool_size,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=True,
        )

    return create_engine(url, **kwargs)


class UnitOfWork:
    """
    1 本のコネクションを専有するトランザクション単位。

    with 文で使うと、成功・失敗どちらの経路でも必ず 1 回だけ release される。
    """

    def __init__(self, system_id: str, connection: Connection) -> None:
        self.system_id = system_id
        self._connection = connection
        self._transaction: Optional[RootTransaction] = None
        self._released = False

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._released

    def _fail(self, exc: Exception) -> BackendTransactionError:
        return BackendTransactionError(self.system_id, _error_message(exc))

    def begin(self) -> None:
        try:
            self._transaction = self._connection.begin()
        except Exception as exc:  # noqa: BLE001
            raise self._fail(exc) from exc

    def insert_notification_check(self, dm_id: int, notify_check: int, at: datetime) -> None:
        """notification_check に 1 行追加する。cr_date / update_date はどちらも at。"""
        try:
            self._connection.execute(
                notification_check.insert().values(
                    dm_id=dm_id,
                    notify_check=notify_check,
                    cr_date=at,
                    update_date=at,
                )
            )
        except Exception as exc:  # noqa: BLE001
            raise self._fail(exc) from exc

    def insert_api_log(
        self,
        *,
        endpoint: str,
        method: str,
        request_payload: str,
        response_payload: str,
        status_code: int,
        at: datetime,
    ) -> int:
        """
        api_logs に 1 行追加し、採番された ID を返す。
        """
        try:
            result = self._connection.execute(
                api_logs.insert().values(
                    endpoint=endpoint,
                    method=method,
                    request_payload=request_payload,
                    response_payload=response_payload,
                    status_code=status_code,
                    created_at=at,
                )
            )
        except Exception as exc:  # noqa: BLE001
            raise self._fail(exc) from exc

        return int(result.inserted_primary_key[0])

    def commit(self) -> None:
        if self._transaction is None:
            raise BackendTransactionError(self.system_id, "Transaction has not been started.")
        try:
            self._transaction.commit()
        except Exception as exc:  # noqa: BLE001
            raise self._fail(exc) from exc

    def rollback(self) -> None:
        """
        トランザクションを巻き戻す。begin 前に失敗していた場合は何もしない。
        """
        if self._transaction is None or not self._transaction.is_active:
            return
        try:
            self._transaction.rollback()
        except Exception as exc:  # noqa: BLE001
            raise self._fail(exc) from exc

    def release(self) -> None:
        """コネクションをプールへ返す。2 回目以降の呼び出しは何もしない。"""
        if self._released:
            return
        self._released = True
        self._connection.close()


class BackendClient:
    """
    バックエンド DB 1 系統分のクライアント。

    エンジン（コネクションプール）はこのインスタンスが所有し、
    dispose() で破棄する。プールを他のバックエンドと共有することはない。
    """

    def __init__(self, settings: BackendSettings, engine: Optional[Engine] = None) -> None:
        self._settings = settings
        self._engine = engine or build_engine(settings)

    @property
    def system_id(self) -> str:
        return self._settings.system_id

    @property
    def name(self) -> str:
        return self._settings.name

    @property
    def engine(self) -> Engine:
        return self._engine

    def acquire(self) -> UnitOfWork:
        """
        プールからコネクションを 1 本借りて UnitOfWork を返す。

        :raises BackendUnavailableError: 接続できない / プールが枯渇している場合。
        """
        try:
            connection = self._engine.connect()
        except SQLAlchemyError as exc:
            raise BackendUnavailableError(self.system_id, _error_message(exc)) from exc
        return UnitOfWork(self.system_id, connection)

    def create_schema(self) -> None:
        """notification_check / api_logs が無ければ作成する。"""
        metadata.create_all(self._engine)

    def dispose(self) -> None:
        """コネクションプールを閉じる。"""
        self._engine.dispose()
