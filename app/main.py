"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.db.session import async_session_maker, engine
from app.errors import TenancyError, build_error_payload, tenancy_error_handler
from app.routers import companies, drivers, health, payments, tenants
from app.services.tenant_lifecycle_service import TenantLifecycleService
from app.services.tenant_registry import TenantRegistry
from app.tenancy.provisioner import SchemaProvisioner
from app.tenancy.router import TenantConnectionRouter

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: builds the tenant registry, provisioner and connection router
      over the shared engine.
    - On shutdown: releases every tenant handle and closes the pool.
    """
    logger.info("Starting %s...", settings.APP_NAME)

    registry = TenantRegistry(async_session_maker)
    provisioner = SchemaProvisioner(engine, registry)
    tenant_router = TenantConnectionRouter(engine, registry, provisioner, owns_engine=True)

    app.state.tenant_registry = registry
    app.state.tenant_router = tenant_router
    app.state.tenant_lifecycle = TenantLifecycleService(registry, provisioner, tenant_router)

    yield  # The server runs while we're "yielded" here

    logger.info("Shutting down %s...", settings.APP_NAME)
    await tenant_router.release_all()


async def value_error_handler(_: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content=build_error_payload("INVALID_REQUEST", str(exc)))


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant backend for transport invoicing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(TenancyError, tenancy_error_handler)
app.add_exception_handler(ValueError, value_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(tenants.router)
app.include_router(companies.router)
app.include_router(drivers.router)
app.include_router(payments.router)
