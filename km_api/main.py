import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from km_api.config.config import settings
from km_api.config.database import engine
from km_api.config.errors import (
    AlreadyExistsError,
    AppError,
    AuthenticationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from km_api.db.init_db import init_tables
from km_api.routers import company_router, user_router
from km_api.schemas.common_schema import APIError, APIResponse

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyExistsError: status.HTTP_409_CONFLICT,
}


def error_response(status_code: int, code: str, message: str, details: str | None = None) -> JSONResponse:
    body = APIResponse(success=False, error=APIError(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def app_error_handler(request: Request, exc: AppError):
    status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()
    )
    return error_response(status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION, "invalid request data", details)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # DB 테이블 생성
    init_tables()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    app = FastAPI(title="km-api", version="0.1.0", lifespan=lifespan)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # 라우터 등록
    app.include_router(user_router.router, prefix="/api/v1")
    app.include_router(company_router.router, prefix="/api/v1")
    app.include_router(company_router.membership_router, prefix="/api/v1")

    @app.get("/api/v1/health", tags=["health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
