import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from routers import health, base
from schemas import ErrorResponse

# アプリケーション全体のログレベル設定
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "リクエストの形式が不正です。JSON形式で prompt を指定してください。"

app = FastAPI(title="Lark Base Builder API")

# CORS 設定
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """リクエスト本文の解析エラーも他のエラーと同じ形式で返す"""
    logger.error(f"Invalid request to {request.url.path}: {exc.errors()}")
    error = ErrorResponse(error=INVALID_REQUEST_MESSAGE)
    return JSONResponse(status_code=500, content=error.model_dump())


# ルーター登録
app.include_router(health.router)
app.include_router(base.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
