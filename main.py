import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import gold_finance.models  # ensure models are registered
from gold_finance.core.config import CORS_ORIGINS, LOG_DIR, LOG_LEVEL, OTP_TTL_SECONDS, SCHEDULER_ENABLED
from gold_finance.core.logging import setup_logging
from gold_finance.utils.database import engine, Base
from gold_finance.services.otp_store import OtpStore
from gold_finance.services.scheduler import build_scheduler

from gold_finance.routers import (
    customers_router,
    loans_router,
    schemes_router,
    jobs_router,
    otp_router,
    reports_router,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Gold Finance Backend API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(customers_router.router)
app.include_router(loans_router.router)
app.include_router(schemes_router.router)
app.include_router(jobs_router.router)
app.include_router(otp_router.router)
app.include_router(reports_router.router)

app.state.otp_store = OtpStore(ttl_seconds=OTP_TTL_SECONDS)
app.state.scheduler = None


@app.on_event("startup")
def on_startup():
    setup_logging(LOG_LEVEL, LOG_DIR)

    # DEV ONLY – OK for now
    Base.metadata.create_all(bind=engine)

    if SCHEDULER_ENABLED:
        scheduler = build_scheduler()
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info("[CRON] Interest update and penalty check jobs started.")


@app.on_event("shutdown")
def on_shutdown():
    if app.state.scheduler is not None:
        app.state.scheduler.shutdown(wait=False)
        app.state.scheduler = None


@app.get("/")
def root():
    return {"message": "Gold Finance Backend is running!!"}
