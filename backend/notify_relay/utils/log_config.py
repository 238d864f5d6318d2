# backend/notify_relay/utils/log_config.py

"""
ロギング設定。

各モジュールは ``logger = logging.getLogger(__name__)`` で取得したロガーに
``extra={"fields": {...}}`` の形で構造化フィールドを渡す。
ここでは notify_relay パッケージのロガーに以下のハンドラを取り付ける。

- コンソール: テキスト 1 行 + 末尾に ``fields={...}``
- combined.log: 全レベルを JSON Lines で出力
- error.log: ERROR 以上のみを JSON Lines で出力

ルートロガーではなくパッケージロガーに付けるので、
uvicorn や pytest が先にルートを設定していても出力される。
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import get_env

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "notify_relay"

DEFAULT_LOG_FILE = "combined.log"
DEFAULT_ERROR_LOG_FILE = "error.log"

# LOG_FILE / LOG_ERROR_FILE にこの値を指定するとファイル出力を無効にする
DISABLED = "none"


class StructuredFieldsFilter(logging.Filter):
    """fields を持たないレコードに空の dict を補う。"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not isinstance(getattr(record, "fields", None), dict):
            record.fields = {}
        return True


class StructuredFormatter(logging.Formatter):
    """
    通常のテキスト出力の末尾に ``fields={...}`` (JSON) を付け足すフォーマッタ。
    """

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = getattr(record, "fields", None)
        if fields:
            text += " fields=" + json.dumps(fields, ensure_ascii=False, default=str)
        return text


class JsonLinesFormatter(logging.Formatter):
    """1 レコード = 1 行の JSON。timestamp / level / message に fields を展開する。"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if fields:
            entry.update(fields)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _build_handler(
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int = logging.NOTSET,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(StructuredFieldsFilter())
    return handler


def _resolve_path(value: Optional[str], env_name: str, default: str) -> Optional[str]:
    path = value or get_env(env_name, default=default, required=False)
    if path.strip().lower() == DISABLED:
        return None
    return path


def configure_logging(
    level: Optional[str] = None,
    *,
    log_file: Optional[str] = None,
    error_log_file: Optional[str] = None,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """
    パッケージロガーを初期化して返す。

    - LOG_LEVEL      : ログレベル（デフォルト INFO）
    - LOG_FILE       : 全レベルを書き出すファイル（デフォルト combined.log、"none" で無効）
    - LOG_ERROR_FILE : ERROR 以上のみを書き出すファイル（デフォルト error.log、"none" で無効）

    2 回目以降の呼び出しは何もしない。
    """
    logger = logging.getLogger(logger_name)
    if getattr(logger, "_notify_relay_configured", False):
        return logger

    level = level or get_env("LOG_LEVEL", default="INFO", required=False)
    log_file = _resolve_path(log_file, "LOG_FILE", DEFAULT_LOG_FILE)
    error_log_file = _resolve_path(error_log_file, "LOG_ERROR_FILE", DEFAULT_ERROR_LOG_FILE)

    handlers: List[logging.Handler] = [
        _build_handler(logging.StreamHandler(), StructuredFormatter(LOG_FORMAT))
    ]
    if log_file:
        handlers.append(
            _build_handler(logging.FileHandler(log_file, encoding="utf-8"), JsonLinesFormatter())
        )
    if error_log_file:
        handlers.append(
            _build_handler(
                logging.FileHandler(error_log_file, encoding="utf-8"),
                JsonLinesFormatter(),
                level=logging.ERROR,
            )
        )

    logger.setLevel(level.upper())
    for handler in handlers:
        logger.addHandler(handler)
    logger._notify_relay_configured = True  # type: ignore[attr-defined]
    return logger


def reset_logging(logger_name: str = PACKAGE_LOGGER) -> None:
    """
    テスト用に configure_logging() で付けたハンドラを外して閉じる。
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger._notify_relay_configured = False  # type: ignore[attr-defined]
