# roastmyrun/main.py
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional
import logging

import httpx
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from . import config
from .duration import normalize_duration
from .edit import router as edit_router
from .roast import RoastWriter, build_prompt

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one pooled client for all terrain tile requests
    app.state.http_client = httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT)
    logger.info(f"Roast My Run v{config.API_VERSION} started")
    yield
    await app.state.http_client.aclose()
    logger.info("Roast My Run shutdown")


app = FastAPI(
    title="Roast My Run",
    description="Draw a running route, get its metrics, get roasted.",
    version=config.API_VERSION,
    lifespan=lifespan,
)
app.include_router(edit_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ElevationIn(BaseModel):
    gain: float
    loss: float
    max: Optional[float] = None
    min: Optional[float] = None


class RoastRequest(BaseModel):
    distance: float
    unit: Optional[str] = None
    elevation: Optional[ElevationIn] = None
    duration: Optional[str] = None


class RoastResponse(BaseModel):
    roast: str


class MapConfig(BaseModel):
    center: List[float]
    zoom: float
    access_token: str
    style: str


_writer: Optional[RoastWriter] = None


def get_roast_writer() -> RoastWriter:
    global _writer
    if _writer is None:
        _writer = RoastWriter(
            model=config.ROAST_MODEL,
            temperature=config.ROAST_TEMPERATURE,
            max_tokens=config.ROAST_MAX_TOKENS,
            api_key=config.OPENAI_API_KEY,
        )
    return _writer


@app.post("/api/generate-roast", response_model=RoastResponse)
async def generate_roast(payload: RoastRequest, writer: RoastWriter = Depends(get_roast_writer)):
    """
    Turn the route metrics into a prompt and relay the model's roast.
    Any failure is logged and reported as a generic 500.
    """
    prompt = build_prompt(
        distance=payload.distance,
        unit=payload.unit,
        elevation=payload.elevation.model_dump() if payload.elevation else None,
        duration=normalize_duration(payload.duration),
    )
    try:
        roast = await writer.write(prompt)
    except Exception:
        logger.exception("Failed to generate roast")
        return JSONResponse(status_code=500, content={"error": "Failed to generate roast"})

    return RoastResponse(roast=roast)


@app.get("/api/map-config", response_model=MapConfig)
def get_map_config():
    return MapConfig(
        center=list(config.DEFAULT_CENTER),
        zoom=config.DEFAULT_ZOOM,
        access_token=config.MAPBOX_ACCESS_TOKEN,
        style=config.MAP_STYLE,
    )


@app.get("/health")
def health_check():
    return {"status": "ok", "version": config.API_VERSION}


@app.get("/", include_in_schema=False)
def index():
    return FileResponse(STATIC_DIR / "index.html")
