# -*- coding: utf-8 -*-
"""FastAPI application for the HearCare results backend."""

import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hearcare import __version__
from hearcare.api.endpoints.results import router as results_router
from hearcare.utils.logging import get_logger

load_dotenv()

logger = get_logger("hearcare")

DEFAULT_CORS_ORIGINS = "http://localhost:5173"


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(title="HearCare Results API", version=__version__)

CORS_ORIGINS = _cors_origins()
logger.debug("Allowed CORS origins: %s", CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(results_router)


@app.get("/")
async def root():
    return {"message": "HearCare Results API", "version": __version__}
