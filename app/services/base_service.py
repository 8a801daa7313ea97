import logging
from typing import Any, Optional

from clients import LarkClient, LarkConfig, LarkCredentials
from config import settings
from domains.provisioner import BaseProvisioner
from domains.schema_generator import generate_schema
from errors import ValidationError
from schemas import MAX_TABLES, CreateBaseRequest, CreateBaseResponse, GeneratedSchema

logger = logging.getLogger(__name__)


class BaseService:
    """自然言語の要求からLark Baseを作成するサービスクラス"""

    def __init__(self, client: Optional[LarkClient] = None, provisioner: Optional[BaseProvisioner] = None):
        self.client = client or LarkClient(LarkConfig.from_settings())
        self.provisioner = provisioner or BaseProvisioner(self.client)

    def validate_prompt(self, prompt: Any) -> str:
        """プロンプトを検証して前後の空白を除いた値を返す"""
        if prompt is not None and not isinstance(prompt, str):
            raise ValidationError("プロンプトは文字列で指定してください")
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError("Prompt is required")
        if len(prompt) > settings.MAX_PROMPT_LENGTH:
            raise ValidationError(
                f"プロンプトは{settings.MAX_PROMPT_LENGTH}文字以内で入力してください（現在: {len(prompt)}文字）")
        return prompt

    def validate_schema(self, schema: GeneratedSchema) -> None:
        if len(schema.tables) > MAX_TABLES:
            raise ValidationError(
                f"テーブル数が上限（{MAX_TABLES}個）を超えています: {len(schema.tables)}個")

    def create_base(self, request: CreateBaseRequest) -> CreateBaseResponse:
        """
        Base構成を生成し、Lark上にBaseを構築する

        Raises:
            LarkBaseBuilderError: 処理全体が失敗した場合
        """
        prompt = self.validate_prompt(request.prompt)

        # 認証情報は外部呼び出しの前に確認する
        credentials = LarkCredentials.from_settings()

        logger.info(f"Base構成を生成します（プロンプト: {len(prompt)}文字）")
        schema = generate_schema(prompt, settings.GEMINI_API_KEY)
        self.validate_schema(schema)

        report = self.provisioner.provision(schema, credentials)

        return CreateBaseResponse(
            base_name=report.base_name,
            base_url=report.base_url,
            summary=report.summary,
            details=report.results,
        )
