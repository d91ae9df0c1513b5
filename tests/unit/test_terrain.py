"""
Terrain tile addressing, pixel decoding and concurrent sampling.
"""

import asyncio

import httpx
import pytest

from conftest import make_sampler, terrain_png, tile_x_from_request
from roastmyrun.metrics import sample_points
from roastmyrun.terrain import decode_elevation, rgb_to_elevation, tile_for


class TestTileAddressing:
    def test_origin_at_zoom_zero(self):
        tile = tile_for(0.0, 0.0, 0)
        assert (tile.z, tile.x, tile.y) == (0, 0, 0)
        assert (tile.px, tile.py) == (128, 128)

    def test_child_tile_sits_inside_parent(self):
        parent = tile_for(-74.006, 40.7128, 14)
        child = tile_for(-74.006, 40.7128, 15)
        assert child.x // 2 == parent.x
        assert child.y // 2 == parent.y
        assert 0 <= parent.px < 256 and 0 <= parent.py < 256
        # western hemisphere, northern hemisphere
        assert parent.x < 2 ** 13 and parent.y < 2 ** 13

    def test_edges_stay_inside_the_grid(self):
        tile = tile_for(180.0, -90.0, 3)
        assert tile.x == 7 and tile.y == 7
        assert tile.px == 255 and tile.py == 255


class TestDecoding:
    def test_rgb_formula(self):
        assert rgb_to_elevation(0, 0, 0) == -10000.0
        assert rgb_to_elevation(1, 134, 160) == pytest.approx(0.0)

    def test_decode_solid_tile(self):
        assert decode_elevation(terrain_png(123.4), 10, 200) == pytest.approx(123.4)

    def test_decode_retina_tile(self):
        assert decode_elevation(terrain_png(55.0, size=512), 255, 255) == pytest.approx(55.0)


class TestSampler:
    def test_tile_url(self):
        sampler = make_sampler(lambda request: httpx.Response(200))
        tile = tile_for(0.0, 0.0, 14)
        assert sampler.tile_url(tile) == "https://tiles.test/14/8192/8192.pngraw?access_token=pk.test"

    def test_climbing_line(self):
        line = [(0.0, 0.0), (0.3, 0.0)]
        tiles = [tile_for(lon, lat, 14).x for lon, lat in sample_points(line, 4)]
        heights = dict(zip(tiles, [0.0, 10.0, 20.0, 30.0]))
        assert len(heights) == 4

        def handler(request):
            return httpx.Response(200, content=terrain_png(heights[tile_x_from_request(request)]))

        stats = asyncio.run(make_sampler(handler).sample_line(line, 4))
        assert stats.gain == pytest.approx(30.0)
        assert stats.loss == pytest.approx(0.0)
        assert stats.max == pytest.approx(30.0)
        assert stats.min == pytest.approx(0.0)

    def test_one_request_per_sample(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, content=terrain_png(5.0))

        asyncio.run(make_sampler(handler).sample_line([[0.0, 0.0], [0.01, 0.0]], 7))
        assert len(seen) == 7

    def test_failed_tile_counts_as_zero(self):
        def handler(request):
            return httpx.Response(500)

        sampler = make_sampler(handler)
        assert asyncio.run(sampler.elevation_at(0.0, 0.0)) == 0.0

        stats = asyncio.run(sampler.sample_line([[0.0, 0.0], [0.1, 0.0]], 3))
        assert stats.gain == 0.0 and stats.max == 0.0

    def test_undecodable_tile_counts_as_zero(self):
        sampler = make_sampler(lambda request: httpx.Response(200, content=b"not a png"))
        assert asyncio.run(sampler.elevation_at(0.0, 0.0)) == 0.0

    def test_connection_error_counts_as_zero(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert asyncio.run(make_sampler(handler).elevation_at(0.0, 0.0)) == 0.0

    def test_single_point_line(self):
        sampler = make_sampler(lambda request: httpx.Response(200, content=terrain_png(77.0)))
        stats = asyncio.run(sampler.sample_line([[0.0, 0.0]], 20))
        assert stats.gain == 0.0 and stats.loss == 0.0
        assert stats.max == pytest.approx(77.0)

    def test_empty_line(self):
        sampler = make_sampler(lambda request: httpx.Response(200))
        assert asyncio.run(sampler.sample_line([], 20)) is None

    def test_malformed_line_raises(self):
        sampler = make_sampler(lambda request: httpx.Response(200))
        with pytest.raises(ValueError):
            asyncio.run(sampler.sample_line([[0.0, 100.0]], 5))
