import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from competition_engine.database import init_db
from competition_engine.routes import bracket, events, groups, heats, matches

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Competition Engine API"

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(heats.router, prefix="/api", tags=["heats"])
app.include_router(groups.router, prefix="/api", tags=["groups"])
app.include_router(bracket.router, prefix="/api", tags=["bracket"])
app.include_router(matches.router, prefix="/api", tags=["matches"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}
