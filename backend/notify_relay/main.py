# backend/notify_relay/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /work/notifyme エンドポイントを公開する
- system1 / system2 のバックエンドクライアントを生成し、終了時に破棄する
- 想定外の例外を {"error": "Internal server error"} に揃える
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from notify_relay.backends import BackendRegistry, build_backend_registry
from notify_relay.notify.router import router as notify_router
from notify_relay.notify.schemas import ErrorResponse, FieldViolation, ValidationErrorResponse
from notify_relay.utils.config import get_env, get_env_bool, get_env_int, load_env_file
from notify_relay.utils.log_config import configure_logging

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000


async def _invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """JSON として読めないボディを 400 で返す。"""
    body = ValidationErrorResponse(
        errors=[FieldViolation(field="body", message="Request body must be valid JSON")]
    )
    logger.error(
        "Validation errors",
        extra={"fields": {"errors": [e.get("msg") for e in exc.errors()]}},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def _server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Server error", extra={"fields": {"error": str(exc)}})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse().model_dump(),
    )


def create_app(backends: Optional[BackendRegistry] = None) -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - 通知ファンアウトエンドポイント (/work/notifyme)
    - ヘルスチェックエンドポイント (/health)

    :param backends: テスト等で差し込むバックエンド群。省略時は環境変数から生成する。
    """
    load_env_file()
    registry = backends if backends is not None else build_backend_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        if get_env_bool("DB_CREATE_SCHEMA"):
            registry.create_schema()
        logger.info(
            "BFF server running on port %s",
            get_env_int("PORT", default=DEFAULT_PORT),
        )
        try:
            yield
        finally:
            registry.close()

    app = FastAPI(title="Notify Relay BFF", lifespan=lifespan)
    app.state.backends = registry

    # ルーター登録
    app.include_router(notify_router)

    app.add_exception_handler(RequestValidationError, _invalid_body_handler)
    app.add_exception_handler(Exception, _server_error_handler)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


def run() -> None:
    """`notify-relay` コマンドのエントリーポイント。"""
    uvicorn.run(
        "notify_relay.main:app",
        host=get_env("HOST", default="0.0.0.0", required=False),
        port=get_env_int("PORT", default=DEFAULT_PORT),
    )


# uvicorn 実行時のエントリーポイント
app = create_app()
