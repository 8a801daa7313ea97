import logging
import time
from typing import Callable, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from config import settings
from domains.prompts import create_response_schema, create_system_instruction, create_user_prompt
from errors import ConfigError, SchemaGenerationError
from schemas.base import GeneratedSchema
from utils.gemini import (
    GeminiResponseError, call_gemini, extract_json_from_response, parse_generate_content_response
)
from utils.retry import exponential_backoff, retry_with_backoff

logger = logging.getLogger(__name__)


class SchemaParseError(Exception):
    """AIの応答をBase構成として解釈できない"""


def build_generation_request(prompt: str) -> dict:
    """generateContent のリクエストボディを組み立てる"""
    return {
        "system_instruction": {"parts": [{"text": create_system_instruction()}]},
        "contents": [{"role": "user", "parts": [{"text": create_user_prompt(prompt)}]}],
        "generationConfig": {
            "response_mime_type": "application/json",
            "response_schema": create_response_schema(),
            "temperature": settings.GEMINI_TEMPERATURE,
        },
    }


def parse_generated_schema(text: str) -> GeneratedSchema:
    """
    AIの応答テキストをGeneratedSchemaに変換する

    Raises:
        SchemaParseError: JSONとして解釈できない、または構造が不正な場合
    """
    parsed = extract_json_from_response(text)
    if parsed is None:
        raise SchemaParseError(f"AIの応答がJSONではありません: {text[:200]}")

    if not parsed.get("baseName") or not isinstance(parsed.get("tables"), list) or not parsed["tables"]:
        raise SchemaParseError("AIの応答に baseName または tables が含まれていません")

    try:
        return GeneratedSchema.model_validate(parsed)
    except PydanticValidationError as e:
        raise SchemaParseError(f"AIの応答の構造が不正です: {str(e)}") from e


def generate_schema(
    prompt: str,
    api_key: Optional[str],
    *,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GeneratedSchema:
    """
    自然言語の要求からBase構成を生成する

    Args:
        prompt (str): ユーザーの要求
        api_key (str): Gemini APIキー
        max_attempts (int, optional): 最大試行回数
        base_delay (float, optional): 初回リトライまでの待機秒数（以降倍増）
        session (requests.Session, optional): HTTPセッション
        sleep: 待機関数

    Returns:
        GeneratedSchema: 検証済みのBase構成

    Raises:
        ConfigError: APIキーが未設定の場合
        SchemaGenerationError: 全ての試行が失敗した場合
    """
    if not api_key:
        raise ConfigError("GEMINI_API_KEY is not configured.")

    max_attempts = max_attempts or settings.SCHEMA_MAX_ATTEMPTS
    if base_delay is None:
        base_delay = settings.SCHEMA_RETRY_BASE_DELAY
    payload = build_generation_request(prompt)

    def attempt() -> GeneratedSchema:
        response = call_gemini(payload, api_key, session=session)
        text = parse_generate_content_response(response)
        schema = parse_generated_schema(text)
        logger.info(f"Base構成を生成しました: {schema.base_name}（テーブル数: {len(schema.tables)}）")
        return schema

    try:
        return retry_with_backoff(
            attempt,
            max_attempts=max_attempts,
            should_retry=lambda e: isinstance(e, (GeminiResponseError, SchemaParseError)),
            backoff=exponential_backoff(base_delay),
            sleep=sleep,
            description="スキーマ生成",
        )
    except (GeminiResponseError, SchemaParseError) as e:
        raise SchemaGenerationError(f"AIの応答処理に失敗しました: {str(e)}", cause=e) from e
