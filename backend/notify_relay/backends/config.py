# backend/notify_relay/backends/config.py

"""
各バックエンド DB（system1 / system2）の接続設定をまとめるモジュール。
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import URL, make_url

from notify_relay.utils.config import get_env, get_env_int

SYSTEM_IDS = ("1", "2")

_DEFAULT_DATABASE_NAMES = {
    "1": "bff_api",
    "2": "cloud",
}


@dataclass(frozen=True)
class BackendSettings:
    """バックエンド 1 系統分の DB 接続設定。"""

    system_id: str
    host: str = "localhost"
    user: str = "root"
    password: str = ""
    database: str = "bff_api"
    port: int = 3306
    url: Optional[str] = None
    pool_size: int = 10
    pool_timeout: int = 30

    @property
    def name(self) -> str:
        """レスポンスやログで使う表示名（system1 など）。"""
        return f"system{self.system_id}"

    def sqlalchemy_url(self) -> URL:
        """
        SQLAlchemy の接続 URL を組み立てる。

        DB_URL_SYSTEM<N> が設定されていればそれを優先し、
        そうでなければ MySQL (PyMySQL) の URL を個別の設定値から作る。
        """
        if self.url:
            return make_url(self.url)

        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
        )


def get_backend_settings(system_id: str) -> BackendSettings:
    """
    環境変数からバックエンド設定を読み込む。

    任意（<N> は 1 or 2）:
      - DB_HOST_SYSTEM<N>         (デフォルト: localhost)
      - DB_USER_SYSTEM<N>         (デフォルト: root)
      - DB_PASSWORD_SYSTEM<N>     (デフォルト: 空文字)
      - DB_NAME_SYSTEM<N>         (デフォルト: system1=bff_api / system2=cloud)
      - DB_PORT_SYSTEM<N>         (デフォルト: 3306)
      - DB_URL_SYSTEM<N>          (上記をまとめて上書きする SQLAlchemy URL)
      - DB_POOL_SIZE_SYSTEM<N>    (デフォルト: 10)
      - DB_POOL_TIMEOUT_SYSTEM<N> (デフォルト: 30 秒)
    """
    if system_id not in SYSTEM_IDS:
        raise ValueError(f"Unknown backend system id: {system_id!r}")

    suffix = f"SYSTEM{system_id}"

    return BackendSettings(
        system_id=system_id,
        host=get_env(f"DB_HOST_{suffix}", default="localhost", required=False),
        user=get_env(f"DB_USER_{suffix}", default="root", required=False),
        password=get_env(f"DB_PASSWORD_{suffix}", default="", required=False),
        database=get_env(
            f"DB_NAME_{suffix}",
            default=_DEFAULT_DATABASE_NAMES[system_id],
            required=False,
        ),
        port=get_env_int(f"DB_PORT_{suffix}", default=3306),
        url=get_env(f"DB_URL_{suffix}", required=False),
        pool_size=get_env_int(f"DB_POOL_SIZE_{suffix}", default=10),
        pool_timeout=get_env_int(f"DB_POOL_TIMEOUT_{suffix}", default=30),
    )
