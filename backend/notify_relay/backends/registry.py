# backend/notify_relay/backends/registry.py

"""
アプリ全体で使うバックエンドクライアントの集合。

モジュールレベルのシングルトンにはせず、create_app() 時に生成して
app.state に保持し、lifespan の終了時に close() で破棄する。
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator

from .client import BackendClient, BackendClientError
from .config import SYSTEM_IDS, get_backend_settings


class UnknownBackendError(BackendClientError):
    """登録されていない system id を参照した場合の例外。"""


class BackendRegistry:
    """system id ("1" / "2") → BackendClient の対応表。"""

    def __init__(self, clients: Iterable[BackendClient]) -> None:
        self._clients: Dict[str, BackendClient] = {}
        for client in clients:
            self._clients[client.system_id] = client

    def __iter__(self) -> Iterator[BackendClient]:
        return iter(self._clients.values())

    def __len__(self) -> int:
        return len(self._clients)

    def get(self, system_id: str) -> BackendClient:
        try:
            return self._clients[system_id]
        except KeyError:
            raise UnknownBackendError(
                system_id, f"Backend system{system_id} is not configured."
            ) from None

    def create_schema(self) -> None:
        for client in self._clients.values():
            client.create_schema()

    def close(self) -> None:
        """全バックエンドのコネクションプールを破棄する。"""
        for client in self._clients.values():
            client.dispose()


def build_backend_registry() -> BackendRegistry:
    """
    環境変数の設定から system1 / system2 のクライアントを生成する。
    """
    return BackendRegistry(
        BackendClient(get_backend_settings(system_id)) for system_id in SYSTEM_IDS
    )
