"""
Gemini関連のユーティリティ関数
"""
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

import requests

from config import settings

logger = logging.getLogger(__name__)


class GeminiResponseError(Exception):
    """Gemini APIの呼び出し失敗、または期待するフィールドがない"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


def call_gemini(payload: Dict[str, Any], api_key: str, model: Optional[str] = None,
                session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """
    Gemini generateContent APIを呼び出す

    Args:
        payload (dict): リクエストボディ
        api_key (str): APIキー（クエリパラメータで送信）
        model (str, optional): 使用するモデル名
        session (requests.Session, optional): HTTPセッション

    Returns:
        dict: Geminiからの生レスポンス
    """
    model = model or settings.GEMINI_MODEL
    url = f"{settings.GEMINI_API_BASE_URL.rstrip('/')}/models/{model}:generateContent"
    http = session or requests

    logger.info(f"モデル {model} を使用してスキーマを生成します")
    try:
        response = http.post(
            url,
            params={"key": api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=settings.GEMINI_TIMEOUT,
        )
    except requests.RequestException as e:
        raise GeminiResponseError(f"Gemini APIへのリクエストに失敗しました: {str(e)}") from e

    if not response.ok:
        logger.error(f"Gemini API Error: HTTP {response.status_code} {response.text[:500]}")
        raise GeminiResponseError(
            f"Gemini APIがエラーを返しました (HTTP {response.status_code})", status_code=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        raise GeminiResponseError("Gemini APIのレスポンスがJSONではありません") from e


def parse_generate_content_response(response: Dict[str, Any]) -> str:
    """
    generateContentのレスポンスからテキストを抽出する

    Raises:
        GeminiResponseError: candidates[0].content.parts[0].text が存在しない場合
    """
    try:
        text = response["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        logger.error(f"レスポンスにテキストが含まれていません: {json.dumps(response, ensure_ascii=False)[:500]}")
        raise GeminiResponseError("AIからの応答がありません")
    if not text:
        raise GeminiResponseError("AIからの応答が空です")
    return text


def _parse_json_object(text: str) -> Optional[dict]:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_direct(text: str) -> Optional[dict]:
    """テキスト全体をJSONとしてパース"""
    return _parse_json_object(text.strip())


def parse_fenced_block(text: str) -> Optional[dict]:
    """```json ... ``` のコードブロック内をパース"""
    match = re.search(r"```json\s*([\s\S]*?)\s*```", text, re.IGNORECASE)
    if not match:
        return None
    return _parse_json_object(match.group(1))


def parse_brace_span(text: str) -> Optional[dict]:
    """最初の { から最後の } までをパース"""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _parse_json_object(text[start:end + 1])


# 後ろの戦略ほど寛容なので順序を変えないこと
JSON_PARSE_STRATEGIES: List[Callable[[str], Optional[dict]]] = [
    parse_direct,
    parse_fenced_block,
    parse_brace_span,
]


def extract_json_from_response(response_text: str) -> Optional[dict]:
    """
    レスポンステキストからJSONオブジェクトを抽出する

    Returns:
        dict: 最初に成功した戦略の結果。全て失敗した場合は None
    """
    for strategy in JSON_PARSE_STRATEGIES:
        parsed = strategy(response_text)
        if parsed is not None:
            logger.info(f"JSONを抽出しました（{strategy.__name__}）")
            return parsed
    logger.warning("レスポンステキストからJSONを抽出できませんでした")
    return None
