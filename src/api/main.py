"""FastAPI application entry point for the learner trust pipeline."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src import __version__
from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.routes.audit import router as audit_router
from src.api.routes.credentials import router as credentials_router
from src.api.routes.health import router as health_router
from src.api.routes.identity import router as identity_router
from src.api.routes.public_verification import router as public_verification_router
from src.api.startup import run_startup_checks
from src.bootstrap.trust_pipeline import close_trust_pipeline


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await run_startup_checks()
    yield
    await close_trust_pipeline()


app = FastAPI(
    title="Learner Trust Pipeline API",
    description="Identity verification, credential issuance and public verification",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(identity_router)
app.include_router(credentials_router)
app.include_router(public_verification_router)
app.include_router(audit_router)
