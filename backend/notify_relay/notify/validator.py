# backend/notify_relay/notify/validator.py

"""
/work/notifyme のリクエストボディ検証。

バックエンドに触れる前に実行し、違反はフィールドごとにすべて集めて返す。
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from .schemas import FieldViolation, NotificationRequest

logger = logging.getLogger(__name__)

# フィールドの並び順 = 違反の報告順
FIELD_MESSAGES: Dict[str, str] = {
    "dm_id": "dm_id must be an integer",
    "notify_check": "notify_check must be 0 or 1",
    "target_system": "target_system must be 1, 2, or 0",
}


class ValidationError(Exception):
    """リクエストボディが不正な場合の例外。router で 400 にマッピングする。"""

    def __init__(self, violations: List[FieldViolation]) -> None:
        super().__init__(f"{len(violations)} validation error(s)")
        self.violations = violations


def _collect_violations(body: Dict[str, Any], exc: PydanticValidationError) -> List[FieldViolation]:
    failed_fields = {
        error["loc"][0] for error in exc.errors() if error.get("loc")
    }

    violations: List[FieldViolation] = []
    for field, message in FIELD_MESSAGES.items():
        if field not in failed_fields:
            continue
        violations.append(
            FieldViolation(field=field, message=message, value=body.get(field))
        )
    return violations


def validate_notification_request(raw_body: Any) -> NotificationRequest:
    """
    生のリクエストボディを検証して NotificationRequest を返す。

    - JSON オブジェクト以外のボディはフィールドが 1 つも無いものとして扱う
    - 値の正規化・変換は行わない

    :raises ValidationError: 1 件以上の違反があった場合（全件を保持する）。
    """
    body: Dict[str, Any] = raw_body if isinstance(raw_body, dict) else {}

    try:
        return NotificationRequest.model_validate(body)
    except PydanticValidationError as exc:
        violations = _collect_violations(body, exc)

    logger.error(
        "Validation errors",
        extra={"fields": {"errors": [v.model_dump(exclude_none=True) for v in violations]}},
    )
    raise ValidationError(violations)
