# roastmyrun/config.py
import os

from dotenv import load_dotenv

load_dotenv()

API_VERSION = "0.1.0"

# LLM
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
ROAST_MODEL = os.getenv("ROAST_MODEL", "gpt-3.5-turbo")
ROAST_TEMPERATURE = float(os.getenv("ROAST_TEMPERATURE", "0.8"))
ROAST_MAX_TOKENS = int(os.getenv("ROAST_MAX_TOKENS", "150"))

# Map / draw page (public token, the browser needs it anyway)
MAPBOX_ACCESS_TOKEN = os.getenv("MAPBOX_ACCESS_TOKEN", "")
MAP_STYLE = os.getenv("MAP_STYLE", "mapbox://styles/mapbox/streets-v12")
DEFAULT_CENTER = (-74.006, 40.7128)  # lon, lat (New York)
DEFAULT_ZOOM = 12

# Terrain sampling
TERRAIN_TILE_URL = os.getenv(
    "TERRAIN_TILE_URL",
    "https://api.mapbox.com/v4/mapbox.terrain-rgb/{z}/{x}/{y}.pngraw?access_token={token}",
)
TERRAIN_ZOOM = int(os.getenv("TERRAIN_ZOOM", "14"))
ELEVATION_SAMPLES = int(os.getenv("ELEVATION_SAMPLES", "20"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10.0"))

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
