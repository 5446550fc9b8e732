import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campus_eats.config import settings
from campus_eats.database import create_db_and_tables
from campus_eats.routes import (
    admin_verifications,
    auth,
    chat,
    exchange,
    health,
    orders,
    verification,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    logger.info(f"Campus Eats API started (env={settings.env})")
    yield


app = FastAPI(title="Campus Eats API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # invalid input is a 400 across the API, same as the service-level checks
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    # the rejected input is not echoed back; values like Infinity are not valid JSON
    errors = [{k: v for k, v in e.items() if k != "input"} for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": jsonable_encoder(errors)},
    )


app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(verification.router, prefix="/auth", tags=["Courier Verification"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(chat.router, prefix="/chat", tags=["Order Chat"])
app.include_router(exchange.router, prefix="/exchange", tags=["Exchange"])
app.include_router(admin_verifications.router, prefix="/admin/verifications", tags=["Admin Verifications"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "auth_endpoints": [
            "/auth/signup", "/auth/login", "/auth/logout", "/auth/session",
            "/auth/sessions", "/auth/user", "/auth/password",
            "/auth/preferences", "/auth/verification"
        ],
        "order_endpoints": [
            "/orders", "/orders/{order_id}", "/orders/{order_id}/events"
        ],
        "chat_endpoints": [
            "/chat/{order_id}"
        ],
        "exchange_endpoints": [
            "/exchange/listings", "/exchange/listings/{listing_id}"
        ],
        "admin_endpoints": [
            "/admin/verifications", "/admin/verifications/{verification_id}/review"
        ]
    }
