from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import Base, engine
from app.exceptions import PaymentServiceError, ValidationError
from app.logging_config import configure_logging, get_logger
from app.routes import router
from app import models  # noqa: F401  registers tables on Base

configure_logging(get_settings().log_level)
logger = get_logger(__name__)

app = FastAPI(title="Balance Top-up Payment Service")

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(PaymentServiceError)
async def payment_service_error_handler(request: Request, exc: PaymentServiceError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("request_failed", path=request.url.path, error=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(
        "Invalid request body",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return await payment_service_error_handler(request, error)
