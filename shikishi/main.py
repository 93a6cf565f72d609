from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
import logging
import os

from shikishi.core.config import AUTO_CREATE_TABLES, CLIENT_BUILD_DIR, CORS_ORIGINS
from shikishi.core.database import engine
from shikishi.models import Base
from shikishi.routes import boards, health, messages, websockets

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("shikishi.main")
logger.setLevel(logging.INFO)


app = FastAPI(title="Shikishi")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routers
app.include_router(health.router)
app.include_router(boards.router)
app.include_router(messages.router)

# WebSocket Routers
app.include_router(websockets.router)


def mount_client(app: FastAPI, build_dir: str) -> bool:
    """
    Serve the compiled client: /static assets plus index.html for every
    non-API path so client-side routes survive a reload.
    """
    if not build_dir or not os.path.isdir(build_dir):
        return False

    static_dir = os.path.join(build_dir, "static")
    if os.path.isdir(static_dir):
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    index_path = os.path.join(build_dir, "index.html")

    @app.get("/{full_path:path}", include_in_schema=False)
    def spa_fallback(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")
        candidate = os.path.realpath(os.path.join(build_dir, full_path))
        if full_path and candidate.startswith(os.path.realpath(build_dir)) and os.path.isfile(candidate):
            return FileResponse(candidate)
        return FileResponse(index_path)

    logger.info(f"Serving client build from {build_dir}")
    return True


mount_client(app, CLIENT_BUILD_DIR)


@app.on_event("startup")
def on_startup():
    if AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")
