# backend/notify_relay/notify/schemas.py

"""
/work/notifyme のリクエスト・レスポンスのスキーマ定義。
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

# target_system = "0" は system1 と system2 の両方を意味する
BOTH_SYSTEMS = "0"


class NotificationRequest(BaseModel):
    """
    /work/notifyme のリクエストボディ。

    受信後は変更しない（frozen）。型変換は行わず、JSON の整数 / 文字列を
    そのまま受け付ける（strict）。
    """

    model_config = ConfigDict(strict=True, frozen=True)

    dm_id: StrictInt = Field(..., description="通知対象オブジェクトの ID")
    notify_check: Literal[0, 1] = Field(..., description="永続化するフラグ値（0 or 1）")
    target_system: Literal["1", "2", "0"] = Field(
        ...,
        description='書き込み先: "1" / "2" / "0"（両方）',
    )

    @field_validator("notify_check", mode="before")
    @classmethod
    def _reject_non_integer_flag(cls, value: Any) -> Any:
        # bool は int のサブクラスなので明示的に弾く
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("notify_check must be 0 or 1")
        return value

    def target_set(self) -> List[str]:
        """
        書き込み対象のバックエンド ID を処理順に返す。
        """
        if self.target_system == BOTH_SYSTEMS:
            return ["1", "2"]
        return [self.target_system]


class FieldViolation(BaseModel):
    """バリデーション違反 1 件分。"""

    field: str = Field(..., description="違反したフィールド名")
    message: str = Field(..., description="人が読めるエラーメッセージ")
    value: Optional[Any] = Field(None, description="受け取った値（存在した場合のみ）")


class BackendSuccessResult(BaseModel):
    """バックエンド 1 系統への書き込みが成功した結果。"""

    system: str = Field(..., description="system1 / system2")
    status: Literal["success"] = "success"
    log_id: int = Field(..., description="api_logs に採番された ID")


class BackendErrorResult(BaseModel):
    """バックエンド 1 系統への書き込みが失敗（ロールバック済み）した結果。"""

    system: str = Field(..., description="system1 / system2")
    status: Literal["error"] = "error"
    error: str = Field(..., description="ドライバが返したエラーメッセージ")


BackendResult = Annotated[
    Union[BackendSuccessResult, BackendErrorResult],
    Field(discriminator="status"),
]


class NotifyResponse(BaseModel):
    """
    /work/notifyme の 200 レスポンス。

    個々のバックエンドが失敗していても HTTP ステータスは 200 のまま。
    """

    results: List[BackendResult]


class ValidationErrorResponse(BaseModel):
    """400 レスポンス。"""

    errors: List[FieldViolation]


class ErrorResponse(BaseModel):
    """500 レスポンス。内部の詳細は含めない。"""

    error: str = "Internal server error"
