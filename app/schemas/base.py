import logging
import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# AIが設計できる構成の上限
MAX_TABLES = 10
MAX_FIELDS_PER_TABLE = 15
MAX_SAMPLE_RECORDS = 20


class CamelModel(BaseModel):
    """JSON上はcamelCase、Python上はsnake_caseで扱うモデル"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateBaseRequest(BaseModel):
    """Base作成リクエスト"""
    prompt: Optional[Any] = None


class FieldSpec(CamelModel):
    """AIが設計したフィールド定義"""
    name: str
    type: str
    options: Optional[Dict[str, Any]] = None


class TableSpec(CamelModel):
    """AIが設計したテーブル定義"""
    name: str = Field(min_length=1)
    fields: List[FieldSpec] = Field(default_factory=list)
    sample_data_count: int = 0

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("テーブル名が空です")
        return v

    @field_validator("fields")
    @classmethod
    def _limit_fields(cls, v: List[FieldSpec]) -> List[FieldSpec]:
        if len(v) > MAX_FIELDS_PER_TABLE:
            logger.warning(
                f"フィールド数が上限を超えています: {len(v)} > {MAX_FIELDS_PER_TABLE}（超過分は無視します）")
            return v[:MAX_FIELDS_PER_TABLE]
        return v

    @field_validator("sample_data_count", mode="before")
    @classmethod
    def _clamp_sample_count(cls, v: Any) -> int:
        try:
            count = float(v) if v is not None else 0.0
        except OverflowError:
            # float に収まらない巨大な整数
            count = float(MAX_SAMPLE_RECORDS) if v > 0 else 0.0
        except (TypeError, ValueError):
            count = 0.0
        if math.isnan(count):
            count = 0.0
        return int(max(0.0, min(count, float(MAX_SAMPLE_RECORDS))))


class GeneratedSchema(CamelModel):
    """AIが生成したBase構成"""
    base_name: str = Field(min_length=1)
    tables: List[TableSpec] = Field(min_length=1)

    @field_validator("base_name")
    @classmethod
    def _strip_base_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Base名が空です")
        return v


class TableStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"


class TableResult(CamelModel):
    """テーブル単位の作成結果"""
    table_name: str
    status: TableStatus
    table_id: Optional[str] = None
    fields_created: Optional[int] = None
    records_added: Optional[int] = None
    skipped_fields: List[str] = Field(default_factory=list)
    failed_batches: int = 0
    error: Optional[str] = None


class ProvisioningSummary(CamelModel):
    total_tables: int
    successful_tables: int
    failed_tables: int

    @classmethod
    def from_results(cls, results: List[TableResult]) -> "ProvisioningSummary":
        successful = sum(1 for r in results if r.status == TableStatus.SUCCESS)
        return cls(
            total_tables=len(results),
            successful_tables=successful,
            failed_tables=len(results) - successful,
        )


class ProvisioningReport(CamelModel):
    """Base全体の作成結果"""
    base_name: str
    app_token: str
    base_url: Optional[str] = None
    results: List[TableResult]
    summary: ProvisioningSummary


class CreateBaseResponse(CamelModel):
    """Base作成レスポンス"""
    success: bool = True
    message: str = "New Base created successfully!"
    base_name: str
    base_url: Optional[str] = None
    summary: ProvisioningSummary
    details: List[TableResult]
