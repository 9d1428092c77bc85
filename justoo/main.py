from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from justoo.core.config import settings
from justoo.core.errors import AuthError, auth_error_handler, unhandled_exception_handler
from justoo.core.logger import logger
from justoo.middleware.log_middleware import LogMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails startup when production still runs on development defaults
    settings.require_jwt_secret()
    settings.require_sms_backend()
    if settings.AUTO_CREATE_TABLES:
        from justoo.db.session import init_db
        await init_db()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.FRONTEND_ORIGIN is not None,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

app.add_exception_handler(AuthError, auth_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

@app.get("/")
async def root():
    return {"message": "Welcome to Justoo API"}

from justoo.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
