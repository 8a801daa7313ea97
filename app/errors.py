"""
アプリケーション共通の例外クラス

各例外は利用者に返す固定メッセージ（user_message）を持つ。
プロバイダのエラーコードなどの詳細はログにのみ出力する。
"""
from typing import Optional

GENERIC_ERROR_MESSAGE = "Baseの作成中にエラーが発生しました。時間をおいて再度お試しください。"
CREDENTIAL_ERROR_MESSAGE = "サーバーの認証情報が正しく設定されていません。管理者に連絡してください。"
RATE_LIMIT_ERROR_MESSAGE = "APIのレート制限に達しました。しばらく待ってから再度お試しください。"


def _rate_limit_message(cause: Optional[Exception]) -> Optional[str]:
    # Lark / Gemini どちらの例外も is_rate_limited を持つ
    if getattr(cause, "is_rate_limited", False):
        return RATE_LIMIT_ERROR_MESSAGE
    return None


class LarkBaseBuilderError(Exception):
    """基底例外"""

    user_message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class ConfigError(LarkBaseBuilderError):
    """APIキーや認証情報が未設定（リトライしない）"""

    user_message = CREDENTIAL_ERROR_MESSAGE


class ValidationError(LarkBaseBuilderError):
    """入力不備（利用者が修正可能）"""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)


class SchemaGenerationError(LarkBaseBuilderError):
    """AIによるスキーマ生成が全試行で失敗"""

    user_message = "AIによるBase構成の生成に失敗しました。要求の内容を見直して再度お試しください。"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message, user_message=_rate_limit_message(cause))


class AuthError(LarkBaseBuilderError):
    """Larkのアクセストークン取得に失敗"""

    user_message = CREDENTIAL_ERROR_MESSAGE


class RemoteApiError(LarkBaseBuilderError):
    """
    Lark APIの呼び出しエラー。
    HTTPステータスとアプリケーションレベルのcodeを両方保持する。
    """

    RATE_LIMIT_CODE = 99991400

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.path = path
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429 or self.code == self.RATE_LIMIT_CODE


class BaseCreationError(LarkBaseBuilderError):
    """Base自体の作成に失敗（処理全体が失敗する）"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message, user_message=_rate_limit_message(cause))


class TableProvisioningError(LarkBaseBuilderError):
    """テーブル単位のエラー（他のテーブルの処理は継続）"""


class FieldProvisioningError(LarkBaseBuilderError):
    """フィールド単位のエラー（フィールドをスキップして継続）"""


class RecordInsertionError(LarkBaseBuilderError):
    """レコードバッチ単位のエラー（バッチをスキップして継続）"""
