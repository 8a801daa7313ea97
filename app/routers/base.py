from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from errors import GENERIC_ERROR_MESSAGE, LarkBaseBuilderError
from schemas import CreateBaseRequest, CreateBaseResponse, ErrorResponse
from services.base_service import BaseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Base"])


def get_base_service() -> BaseService:
    """リクエストごとにサービスを作成する（HTTPセッションを他のリクエストと共有しない）"""
    return BaseService()


@router.post(
    "/create",
    response_model=CreateBaseResponse,
    responses={500: {"model": ErrorResponse}},
)
def create_base(request: CreateBaseRequest, base_service: BaseService = Depends(get_base_service)):
    """プロンプトからLark Baseを作成する"""
    try:
        return base_service.create_base(request)
    except LarkBaseBuilderError as e:
        logger.error(f"Error creating base ({type(e).__name__}): {str(e)}")
        error = ErrorResponse(error=e.user_message)
    except Exception as e:
        logger.exception(f"Unexpected error creating base: {str(e)}")
        error = ErrorResponse(error=GENERIC_ERROR_MESSAGE)
    return JSONResponse(status_code=500, content=error.model_dump())
