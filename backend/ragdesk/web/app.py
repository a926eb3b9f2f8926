"""Main FastAPI application."""

import logging

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from .database import engine, Base
from .deps import get_settings
from .routes import chat, content

logging.basicConfig(
    level=get_settings()["log_level"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="RagDesk Backend")

# The chat widget is embedded on third-party pages
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")

api_router.include_router(content.router)
api_router.include_router(chat.router)


@api_router.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(api_router)
