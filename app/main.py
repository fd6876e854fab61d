# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.errors import AppError
from app.database import create_db_and_tables, engine, get_session
from app.repositories.product_repo import ProductRepository
from app.seed import seed_sample_products
from app.services.notification_service import get_notification_dispatcher
from app.services.product_service import ProductService

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401
from app.models import contact as _contact_models  # noqa: F401

# Routers
from app.routers.products import router as products_router
from app.routers.orders import router as orders_router
from app.routers.contact import router as contact_router
from app.routers.payment import router as payment_router
from app.routers.admin_stats import router as admin_stats_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("uvicorn")

product_service = ProductService(ProductRepository())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Seed sample products when SEED_SAMPLE_PRODUCTS is set.
      - Check the Telegram bot and create the Google Sheets
        worksheets (best-effort).
    """
    logger.info("🔄 Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except SQLAlchemyError as e:
        logger.error("❌ Startup: DB connection FAILED: %s", e)
        raise

    if settings.SEED_SAMPLE_PRODUCTS:
        with Session(engine) as session:
            seed_sample_products(session)

    dispatcher = get_notification_dispatcher()
    dispatcher.telegram.test_connection()
    if dispatcher.ensure_sheets():
        logger.info("✅ Startup: Google Sheets ready.")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handlers ---
# Every error leaves as {"message": ..., "error"?: ...}.


def _error_body(message: str, detail=None) -> dict:
    body = {"message": message}
    if detail is not None:
        body["error"] = detail
    return body


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        if settings.is_production and exc.status_code == 500:
            return JSONResponse(
                status_code=exc.status_code, content=_error_body("Server error")
            )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.errors or None),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Endpoint not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(message)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body("Invalid request", errors),
    )


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    detail = None if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Database error", detail),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = None if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Server error", detail),
    )


app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(contact_router, prefix=settings.API_PREFIX)
app.include_router(payment_router, prefix=settings.API_PREFIX)
app.include_router(admin_stats_router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health", tags=["Health"])
def health():
    """Health check endpoint."""
    return {
        "status": "OK",
        "message": "Paket UZB API is running",
        "timestamp": utcnow().isoformat(),
    }


@app.get(f"{settings.API_PREFIX}/categories", response_model=list[str], tags=["Products"])
def list_categories(session: Session = Depends(get_session)):
    """Distinct product categories present in the catalog."""
    return product_service.list_categories(session)
