"""
Base構築処理

生成済みのBase構成をLark APIの呼び出し列に変換する。
Base作成の失敗は致命的だが、テーブル・フィールド・レコードバッチ単位の失敗は
記録して後続の処理を継続する。
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from config import settings
from domains.field_types import map_field_type
from domains.sample_data import build_sample_records
from errors import (
    BaseCreationError, FieldProvisioningError, RecordInsertionError,
    RemoteApiError, TableProvisioningError
)
from schemas.base import (
    FieldSpec, GeneratedSchema, ProvisioningReport, ProvisioningSummary,
    TableResult, TableSpec, TableStatus
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisioningPolicy:
    """レート制限対策の待機時間とバッチサイズ"""
    table_delay: float = 0.5
    field_delay: float = 0.25
    batch_size: int = 10
    batch_delay: float = 0.5

    @classmethod
    def from_settings(cls) -> "ProvisioningPolicy":
        return cls(
            table_delay=settings.TABLE_CREATE_DELAY,
            field_delay=settings.FIELD_CREATE_DELAY,
            batch_size=settings.RECORD_BATCH_SIZE,
            batch_delay=settings.RECORD_BATCH_DELAY,
        )


class BaseProvisioner:
    """Base・テーブル・フィールド・サンプルレコードを順番に作成する"""

    def __init__(self, client, policy: Optional[ProvisioningPolicy] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.policy = policy or ProvisioningPolicy.from_settings()
        self.sleep = sleep

    def provision(self, schema: GeneratedSchema, credentials) -> ProvisioningReport:
        """
        Base構成に従ってLark Baseを構築する

        Raises:
            AuthError: アクセストークンの取得に失敗した場合
            BaseCreationError: Baseの作成に失敗した場合
        """
        # アクセストークンは1回の実行で共有する
        token = self.client.get_tenant_access_token(credentials)

        app_token, base_url = self._create_base(token, schema.base_name)

        results = []
        for index, table in enumerate(schema.tables, start=1):
            logger.info(f"テーブル {index}/{len(schema.tables)} を作成します: {table.name}")
            results.append(self._provision_table(token, app_token, table))

        summary = ProvisioningSummary.from_results(results)
        logger.info(
            f"Baseの構築が完了しました: 成功 {summary.successful_tables} / 失敗 {summary.failed_tables}")

        return ProvisioningReport(
            base_name=schema.base_name,
            app_token=app_token,
            base_url=base_url,
            results=results,
            summary=summary,
        )

    def _create_base(self, token: str, base_name: str) -> Tuple[str, Optional[str]]:
        try:
            app = self.client.create_base(token, base_name)
        except RemoteApiError as e:
            logger.error(f"Baseの作成に失敗しました: {str(e)}")
            raise BaseCreationError(f"Baseの作成に失敗しました: {str(e)}", cause=e) from e

        app_token = app.get("app_token")
        if not app_token:
            raise BaseCreationError("Base作成のレスポンスに app_token が含まれていません")

        logger.info(f"Baseを作成しました: {base_name} ({app_token})")
        return app_token, app.get("url")

    def _provision_table(self, token: str, app_token: str, table: TableSpec) -> TableResult:
        try:
            table_id = self._create_table(token, app_token, table.name)
        except TableProvisioningError as e:
            logger.error(f"テーブル {table.name} の作成に失敗しました: {str(e)}")
            return TableResult(table_name=table.name, status=TableStatus.FAILED, error=str(e))

        self.sleep(self.policy.table_delay)

        created_fields, skipped_fields = self._create_fields(token, app_token, table_id, table.fields)

        records_added = 0
        failed_batches = 0
        if created_fields and table.sample_data_count > 0:
            records_added, failed_batches = self._insert_sample_records(
                token, app_token, table_id, created_fields, table.sample_data_count)

        return TableResult(
            table_name=table.name,
            status=TableStatus.SUCCESS,
            table_id=table_id,
            fields_created=len(created_fields),
            records_added=records_added,
            skipped_fields=skipped_fields,
            failed_batches=failed_batches,
        )

    def _create_table(self, token: str, app_token: str, name: str) -> str:
        try:
            table_id = self.client.create_table(token, app_token, name)
        except RemoteApiError as e:
            raise TableProvisioningError(str(e)) from e
        if not table_id:
            raise TableProvisioningError("テーブル作成のレスポンスに table_id が含まれていません")
        return table_id

    def _create_fields(self, token: str, app_token: str, table_id: str,
                       fields: List[FieldSpec]) -> Tuple[List[FieldSpec], List[str]]:
        created = []
        skipped = []
        for field in fields:
            mapping = map_field_type(field.type, field.options)
            if mapping is None:
                logger.warning(f"未対応のフィールドタイプのためスキップします: {field.name} ({field.type})")
                skipped.append(field.name)
                continue

            try:
                self._create_field(token, app_token, table_id, mapping.to_payload(field.name))
            except FieldProvisioningError as e:
                logger.error(f"フィールド {field.name} の作成に失敗しました: {str(e)}")
                skipped.append(field.name)
                continue

            created.append(field)
            self.sleep(self.policy.field_delay)

        logger.info(f"フィールドを {len(created)}/{len(fields)} 件作成しました")
        return created, skipped

    def _create_field(self, token: str, app_token: str, table_id: str, payload: dict) -> None:
        try:
            self.client.create_field(token, app_token, table_id, payload)
        except RemoteApiError as e:
            raise FieldProvisioningError(str(e)) from e

    def _insert_sample_records(self, token: str, app_token: str, table_id: str,
                               fields: List[FieldSpec], count: int) -> Tuple[int, int]:
        """サンプルレコードをバッチ投入し、(追加件数, 失敗バッチ数) を返す"""
        records = build_sample_records(fields, count)
        if not records:
            return 0, 0

        batch_size = max(1, self.policy.batch_size)
        record_ids = []
        failed_batches = 0
        for start in range(0, len(records), batch_size):
            if start > 0:
                self.sleep(self.policy.batch_delay)
            batch = records[start:start + batch_size]
            try:
                created = self._insert_batch(token, app_token, table_id, batch)
            except RecordInsertionError as e:
                # TODO: 失敗したバッチの行を TableResult に載せて呼び出し側から再投入できるようにする
                logger.error(f"レコードの追加に失敗しました（{start + 1}〜{start + len(batch)}行目）: {str(e)}")
                failed_batches += 1
                continue
            record_ids.extend(r.get("record_id") for r in created)

        logger.info(f"サンプルレコードを {len(record_ids)} 件追加しました")
        return len(record_ids), failed_batches

    def _insert_batch(self, token: str, app_token: str, table_id: str, batch: list) -> list:
        try:
            return self.client.batch_create_records(token, app_token, table_id, batch)
        except RemoteApiError as e:
            raise RecordInsertionError(str(e)) from e
