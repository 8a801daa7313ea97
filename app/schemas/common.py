from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ErrorResponse(BaseModel):
    """エラーレスポンス"""
    success: bool = False
    error: str
    timestamp: str = Field(default_factory=_utc_now_iso)
