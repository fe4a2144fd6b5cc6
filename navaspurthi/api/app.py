"""
HTTP API for registrations, the event catalogue and the help chatbot.

Run with: uvicorn navaspurthi.api.app:app
"""
import logging
import os

from fastapi import APIRouter, FastAPI
from starlette.middleware.cors import CORSMiddleware

from navaspurthi.api import chatbot, events, registrations

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Navaspurthi Registration API", version="1.0.0")
    api_router = APIRouter(prefix="/api")

    @api_router.get("/health")
    def health_check():
        return {"status": "healthy"}

    api_router.include_router(registrations.router)
    api_router.include_router(events.router)
    api_router.include_router(chatbot.router)
    app.include_router(api_router)

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
