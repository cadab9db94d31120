from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy import text
import logging
import os

from Endpoints import videos, thumbnails
from db.connection import create_tables
from db.database import engine
from utils.thumbnail_store import build_thumbnail_store

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

THUMBNAIL_STORAGE = os.getenv("THUMBNAIL_STORAGE", "disk")
ASSETS_ROOT = Path(os.getenv("ASSETS_ROOT", "assets"))
HOST = os.getenv("HOST", "localhost")
PORT = os.getenv("PORT", "8091")
BASE_URL = f"http://{HOST}:{PORT}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the videos table exists, then build the thumbnail store
    create_tables()
    logger.info("✅ Database tables verified/created")

    app.state.thumbnail_store = build_thumbnail_store(THUMBNAIL_STORAGE, ASSETS_ROOT, BASE_URL)
    logger.info(f"🖼️ Thumbnail storage: {THUMBNAIL_STORAGE} (public base URL {BASE_URL})")
    yield


app = FastAPI(
    title="Video Thumbnails API",
    description="Video metadata and thumbnail upload service",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create assets directory if it doesn't exist
ASSETS_ROOT.mkdir(parents=True, exist_ok=True)

# Mount static files for serving thumbnails written to disk
app.mount("/assets", StaticFiles(directory=ASSETS_ROOT), name="assets")

# Include routers
app.include_router(videos.router)
app.include_router(thumbnails.router)


@app.get("/")
def root():
    return {
        "message": "Welcome to the Video Thumbnails API",
        "version": "1.0.0",
        "thumbnail_storage": THUMBNAIL_STORAGE
    }


@app.get("/health")
def health_check():
    """Health check endpoint with database status"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": "connected",
            "message": "Video Thumbnails API is running successfully"
        }
    except Exception as e:
        logger.error(f"❌ Health check failed: {e}")
        return {
            "status": "degraded",
            "database": "disconnected",
            "error": str(e),
            "message": "API is running but database is unavailable"
        }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(PORT))
