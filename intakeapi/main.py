import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from intakeapi.config import config
from intakeapi.database import database
from intakeapi.logging_conf import configure_logging
from intakeapi.routers.intake import router as intake_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # connect database
    await database.connect()
    logger.info("Intake API started")
    yield
    # disconnect database
    await database.disconnect()

app = FastAPI(
    title="Alephic Labs Intake API",
    description="Receives website form submissions, logs them and notifies the team",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(intake_router, prefix="/api/intake", tags=["Intake"])
