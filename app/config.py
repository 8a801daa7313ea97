import os


class Settings:
    """アプリケーション設定"""

    # Gemini設定
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")
    GEMINI_API_BASE_URL: str = os.getenv(
        "GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))
    GEMINI_TIMEOUT: float = float(os.getenv("GEMINI_TIMEOUT", "60"))

    # スキーマ生成のリトライ設定
    SCHEMA_MAX_ATTEMPTS: int = int(os.getenv("SCHEMA_MAX_ATTEMPTS", "5"))
    SCHEMA_RETRY_BASE_DELAY: float = float(
        os.getenv("SCHEMA_RETRY_BASE_DELAY", "1.0"))

    # Lark設定
    LARK_APP_ID: str = os.getenv("LARK_APP_ID", "")
    LARK_APP_SECRET: str = os.getenv("LARK_APP_SECRET", "")
    LARK_API_BASE_URL: str = os.getenv(
        "LARK_API_BASE_URL", "https://open.larksuite.com/open-apis")
    LARK_MAX_RETRIES: int = int(os.getenv("LARK_MAX_RETRIES", "3"))
    LARK_RETRY_BASE_DELAY: float = float(
        os.getenv("LARK_RETRY_BASE_DELAY", "1.0"))
    LARK_TIMEOUT: float = float(os.getenv("LARK_TIMEOUT", "30"))

    # 入力制限
    MAX_PROMPT_LENGTH: int = int(os.getenv("MAX_PROMPT_LENGTH", "2000"))

    # プロビジョニング時のレート制限対策
    TABLE_CREATE_DELAY: float = float(os.getenv("TABLE_CREATE_DELAY", "0.5"))
    FIELD_CREATE_DELAY: float = float(os.getenv("FIELD_CREATE_DELAY", "0.25"))
    RECORD_BATCH_SIZE: int = int(os.getenv("RECORD_BATCH_SIZE", "10"))
    RECORD_BATCH_DELAY: float = float(os.getenv("RECORD_BATCH_DELAY", "0.5"))

    # ログ設定
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


# グローバル設定インスタンス
settings = Settings()
