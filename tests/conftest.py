import io

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from roastmyrun.main import app
from roastmyrun.terrain import TerrainSampler

TEST_TILE_URL = "https://tiles.test/{z}/{x}/{y}.pngraw?access_token={token}"


def terrain_png(elevation_m: float, size: int = 256) -> bytes:
    """Solid terrain-RGB tile encoding a single elevation."""
    value = int(round((elevation_m + 10000) * 10))
    rgb = ((value // 65536) % 256, (value // 256) % 256, value % 256)
    buf = io.BytesIO()
    Image.new("RGB", (size, size), rgb).save(buf, "PNG")
    return buf.getvalue()


def tile_x_from_request(request: httpx.Request) -> int:
    # /{z}/{x}/{y}.pngraw
    return int(request.url.path.split("/")[2])


def make_sampler(handler, zoom: int = 14) -> TerrainSampler:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TerrainSampler(client=client, url_template=TEST_TILE_URL, zoom=zoom, access_token="pk.test")


class FakeWriter:
    def __init__(self, reply="Nice 5 miles. Did you stop for brunch halfway?", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def write(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
