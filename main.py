from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from colorit import __version__
from colorit.api.v1 import router as v1_router
from colorit.config import config
from colorit.schemas import HealthResponse
from colorit.utils.logging import get_logger

log = get_logger()

app = FastAPI(
    title="Colorit Color Analysis Engine",
    description="Palette extraction, color conversion, catalog matching and WCAG contrast",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins() or ["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(status="ok", version=__version__)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Colorit Color Analysis Engine",
        "version": __version__,
        "docs": "/docs"
    }


log.info("Colorit API initialized", extra={"version": __version__})
