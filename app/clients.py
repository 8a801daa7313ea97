"""
Lark Open API クライアント
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from config import settings
from errors import AuthError, ConfigError, RemoteApiError
from utils.retry import exponential_backoff, linear_backoff, retry_with_backoff

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/v3/tenant_access_token/internal"


@dataclass(frozen=True)
class LarkConfig:
    """Lark APIの接続設定"""
    base_url: str
    max_retries: int = 3
    retry_base_delay: float = 1.0
    timeout: float = 30.0

    @classmethod
    def from_settings(cls) -> "LarkConfig":
        return cls(
            base_url=settings.LARK_API_BASE_URL,
            max_retries=settings.LARK_MAX_RETRIES,
            retry_base_delay=settings.LARK_RETRY_BASE_DELAY,
            timeout=settings.LARK_TIMEOUT,
        )

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass(frozen=True)
class LarkCredentials:
    """Larkアプリの認証情報"""
    app_id: str
    app_secret: str

    @classmethod
    def from_settings(cls) -> "LarkCredentials":
        if not settings.LARK_APP_ID or not settings.LARK_APP_SECRET:
            raise ConfigError("LARK_APP_ID または LARK_APP_SECRET が設定されていません")
        return cls(app_id=settings.LARK_APP_ID, app_secret=settings.LARK_APP_SECRET)


def create_http_session() -> requests.Session:
    """JSON送受信用のHTTPセッションを作成"""
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json; charset=utf-8"})
    return session


def get_tenant_access_token(credentials: Optional[LarkCredentials], config: LarkConfig,
                            session: Optional[requests.Session] = None) -> str:
    """
    アプリ認証情報からテナントアクセストークンを取得する

    認証エラーは設定不備とみなし、リトライせずに AuthError を送出する。
    """
    if credentials is None or not credentials.app_id or not credentials.app_secret:
        raise AuthError("Larkのアプリ認証情報が指定されていません")

    session = session or create_http_session()
    try:
        response = session.post(
            config.url(TOKEN_PATH),
            json={"app_id": credentials.app_id, "app_secret": credentials.app_secret},
            timeout=config.timeout,
        )
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"アクセストークン取得リクエストに失敗しました: {str(e)}")
        raise AuthError(f"Failed to get tenant access token: {str(e)}") from e

    if not response.ok or data.get("code") != 0:
        logger.error(
            f"アクセストークン取得エラー: HTTP {response.status_code}, code={data.get('code')}, msg={data.get('msg')}")
        raise AuthError(f"Failed to get tenant access token (code: {data.get('code')})")

    token = data.get("tenant_access_token")
    if not token:
        raise AuthError("レスポンスに tenant_access_token が含まれていません")

    logger.info("Larkのテナントアクセストークンを取得しました")
    return token


def _is_retryable(error: Exception) -> bool:
    return isinstance(error, (RemoteApiError, requests.RequestException))


class LarkClient:
    """認証付きでLark APIを呼び出すクライアント"""

    def __init__(self, config: LarkConfig, session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.session = session or create_http_session()
        self.sleep = sleep
        self._rate_limit_backoff = exponential_backoff(config.retry_base_delay)
        self._error_backoff = linear_backoff(config.retry_base_delay)

    def _backoff(self, attempt: int, error: Exception) -> float:
        if isinstance(error, RemoteApiError) and error.is_rate_limited:
            return self._rate_limit_backoff(attempt, error)
        return self._error_backoff(attempt, error)

    def _send(self, token: str, path: str, method: str, body: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        response = self.session.request(
            method,
            self.config.url(path),
            headers={"Authorization": f"Bearer {token}"},
            json=body,
            timeout=self.config.timeout,
        )
        try:
            data = response.json()
        except ValueError:
            raise RemoteApiError(
                f"Lark API Error: invalid JSON response (HTTP {response.status_code}, Path: {path})",
                path=path, status_code=response.status_code)

        code = data.get("code")
        if response.status_code == 429 or not response.ok or code != 0:
            raise RemoteApiError(
                f"Lark API Error: {data.get('msg')} (Code: {code}, Path: {path})",
                code=code, path=path, status_code=response.status_code)
        return data

    def call(self, token: str, path: str, method: str = "POST",
             body: Optional[Dict[str, Any]] = None, max_retries: Optional[int] = None) -> Dict[str, Any]:
        """
        Lark APIを呼び出す

        Args:
            token: テナントアクセストークン
            path: base_url からの相対パス
            method: HTTPメソッド
            body: JSONボディ
            max_retries: 最大試行回数（未指定時は config.max_retries）

        Returns:
            dict: パース済みレスポンス（code == 0）

        Raises:
            RemoteApiError: リトライを使い切っても失敗した場合
        """
        max_attempts = max_retries or self.config.max_retries
        try:
            return retry_with_backoff(
                lambda: self._send(token, path, method, body),
                max_attempts=max_attempts,
                should_retry=_is_retryable,
                backoff=self._backoff,
                sleep=self.sleep,
                description=f"Lark API呼び出し {method} {path}",
            )
        except requests.RequestException as e:
            raise RemoteApiError(f"Lark API request failed: {str(e)} (Path: {path})", path=path) from e

    def get_tenant_access_token(self, credentials: Optional[LarkCredentials]) -> str:
        return get_tenant_access_token(credentials, self.config, self.session)

    def create_base(self, token: str, name: str) -> Dict[str, Any]:
        """Baseを作成し、app_token と url を含む app 情報を返す"""
        data = self.call(token, "/base/v1/apps", body={"name": name})
        return (data.get("data") or {}).get("app") or {}

    def create_table(self, token: str, app_token: str, name: str) -> str:
        """テーブルを作成し、table_id を返す"""
        data = self.call(token, f"/base/v1/apps/{app_token}/tables", body={"name": name})
        return (data.get("data") or {}).get("table_id")

    def create_field(self, token: str, app_token: str, table_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self.call(token, f"/base/v1/apps/{app_token}/tables/{table_id}/fields", body=payload)
        return data.get("data") or {}

    def batch_create_records(self, token: str, app_token: str, table_id: str,
                             records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """レコードを一括作成し、作成されたレコードのリストを返す"""
        data = self.call(
            token,
            f"/base/v1/apps/{app_token}/tables/{table_id}/records/batch_create",
            body={"records": records},
        )
        return (data.get("data") or {}).get("records") or []
