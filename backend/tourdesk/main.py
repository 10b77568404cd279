"""
Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from tourdesk.core.config import settings
from tourdesk.core.database import init_db, SessionLocal
from tourdesk.core.rate_limit import RateLimitMiddleware
from tourdesk.api.v1 import (
    auth, users, audit_logs, settings as settings_router, locations, hotels, transport_pricing,
    crm, inquiries, tour_packages, tour_package_queries, pricing, sales, purchases, receipts, payments, tds,
    expenses, incomes, banking, cashbook, reports, images
)
from tourdesk.services.user_service import UserService


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    db = SessionLocal()
    try:
        UserService(db).seed_admin()
        db.commit()
    finally:
        db.close()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started ({settings.ENVIRONMENT})")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it runs first, before CORS
app.add_middleware(RateLimitMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    content = {"detail": "An unexpected error occurred"}
    if settings.DEBUG:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# images owns catch-all /{entity}/{id}/images paths, so it is mounted last
for module in (
    auth, users, audit_logs, settings_router, locations, hotels, transport_pricing, crm,
    inquiries, tour_packages, tour_package_queries, pricing, sales, purchases, receipts, payments, tds,
    expenses, incomes, banking, cashbook, reports, images,
):
    app.include_router(module.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
