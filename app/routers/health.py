from fastapi import APIRouter

from config import settings

router = APIRouter(tags=["Health"])


@router.get("/")
def read_root():
    return {"message": "Lark Base Builder API is running"}


@router.get("/health")
def health_check():
    """
    稼働確認と外部サービスの設定状況

    認証情報の値そのものは返さず、設定済みかどうかだけを返す。
    """
    gemini_configured = bool(settings.GEMINI_API_KEY)
    lark_configured = bool(settings.LARK_APP_ID and settings.LARK_APP_SECRET)
    return {
        "status": "ok" if gemini_configured and lark_configured else "degraded",
        "geminiConfigured": gemini_configured,
        "larkConfigured": lark_configured,
    }
