"""Shared fixtures: a stand-in NASA service and the proxy in front of it."""

import pytest
from aiohttp import test_utils, web

from nasa_explorer.config import Config
from nasa_explorer.server import create_app
from tests.factories import neo_object, server_url


def make_nasa_app(calls):
    """A fake NASA service that records every request it receives."""

    async def apod(request):
        calls.append((request.path, dict(request.query)))
        return web.json_response({"title": "Pillars of Creation", "date": request.query.get("date", "2024-01-01")})

    async def rover_photos(request):
        calls.append((request.path, dict(request.query)))
        rover = request.match_info["rover"]
        return web.json_response({"photos": [{"id": 1, "rover": {"name": rover.title()}}]})

    async def manifest(request):
        calls.append((request.path, dict(request.query)))
        return web.json_response({"photo_manifest": {"name": request.match_info["rover"].title()}})

    async def neo_feed(request):
        calls.append((request.path, dict(request.query)))
        if request.query.get("start_date") == "bad":
            return web.json_response(
                {"error": {"code": "BAD_REQUEST", "message": "Date Format Exception"}}, status=400
            )
        return web.json_response({
            "element_count": 1,
            "near_earth_objects": {"2024-01-01": [neo_object("3542519", 0.5)]},
        })

    async def search(request):
        calls.append((request.path, dict(request.query)))
        return web.json_response({"collection": {"items": [], "query": dict(request.query)}})

    async def epic(request):
        calls.append((request.path, dict(request.query)))
        return web.json_response([{"identifier": "20240101003633", "date": request.match_info.get("date")}])

    app = web.Application()
    app.router.add_get("/planetary/apod", apod)
    app.router.add_get("/mars-photos/api/v1/rovers/{rover}/photos", rover_photos)
    app.router.add_get("/mars-photos/api/v1/manifests/{rover}", manifest)
    app.router.add_get("/neo/rest/v1/feed", neo_feed)
    app.router.add_get("/search", search)
    app.router.add_get("/EPIC/api/natural", epic)
    app.router.add_get("/EPIC/api/natural/date/{date}", epic)
    return app


@pytest.fixture
def nasa_calls():
    return []


@pytest.fixture
async def nasa_server(nasa_calls):
    async with test_utils.TestServer(make_nasa_app(nasa_calls)) as server:
        yield server


@pytest.fixture
def proxy_config(nasa_server):
    config = Config(use_env=False)
    config.update({
        "api_key": "TESTKEY",
        "nasa_base_url": server_url(nasa_server),
        "images_base_url": server_url(nasa_server),
        "request_timeout": 5,
    })
    return config


@pytest.fixture
async def proxy(proxy_config):
    async with test_utils.TestClient(test_utils.TestServer(create_app(proxy_config))) as client:
        yield client
