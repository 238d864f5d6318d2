# backend/notify_relay/notify/router.py
from __future__ import annotations

import logging
from typing import Any, Union

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse, NotifyResponse, ValidationErrorResponse
from .service import NotifyService
from .validator import ValidationError, validate_notification_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/work", tags=["notify"])


# テスト時は FastAPI の dependency_overrides で差し替え可能
def get_notify_service(request: Request) -> NotifyService:
    return NotifyService(request.app.state.backends)


@router.post(
    "/notifyme",
    response_model=NotifyResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="通知フラグを system1 / system2 に記録",
)
def notify_me(
    payload: Any = Body(default=None),
    service: NotifyService = Depends(get_notify_service),
) -> Union[NotifyResponse, JSONResponse]:
    """
    通知フラグを検証し、target_system に応じたバックエンドへ書き込むエンドポイント。

    - 入力エラー → 400 Bad Request（違反をすべて返す）
    - 一部バックエンドの書き込み失敗 → 200（results 内で error として返す）
    - 想定外の内部エラー → 500 Internal Server Error（詳細はログのみ）
    """
    try:
        notification = validate_notification_request(payload)
    except ValidationError as exc:
        body = ValidationErrorResponse(errors=exc.violations)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=body.model_dump(mode="json", exclude_none=True),
        )

    try:
        return service.notify(notification, payload)
    except Exception as exc:  # noqa: BLE001
        logger.error("Unexpected error", extra={"fields": {"error": str(exc)}}, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse().model_dump(),
        )
