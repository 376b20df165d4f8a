from aiohttp import test_utils

from nasa_explorer.api import ExplorerAPI
from nasa_explorer.config import Config
from nasa_explorer.server import create_app
from nasa_explorer.sections import NeoSection, SectionState


async def test_apod_forwards_params_with_key(proxy, nasa_calls):
    resp = await proxy.get("/api/apod", params={"date": "2024-01-01", "count": ""})
    assert resp.status == 200
    assert await resp.json() == {"title": "Pillars of Creation", "date": "2024-01-01"}
    assert nasa_calls == [("/planetary/apod", {"api_key": "TESTKEY", "date": "2024-01-01"})]


async def test_mars_photos_uses_rover_path_and_default_page(proxy, nasa_calls):
    resp = await proxy.get("/api/mars-photos", params={"rover": "spirit", "sol": "100", "camera": "NAVCAM"})
    assert resp.status == 200
    body = await resp.json()
    assert body["photos"][0]["rover"]["name"] == "Spirit"
    path, query = nasa_calls[0]
    assert path == "/mars-photos/api/v1/rovers/spirit/photos"
    assert query == {"api_key": "TESTKEY", "page": "1", "sol": "100", "camera": "NAVCAM"}


async def test_mars_photos_defaults_to_curiosity(proxy, nasa_calls):
    await proxy.get("/api/mars-photos", params={"earth_date": "2015-06-03", "page": "2"})
    path, query = nasa_calls[0]
    assert path == "/mars-photos/api/v1/rovers/curiosity/photos"
    assert query["page"] == "2"
    assert query["earth_date"] == "2015-06-03"


async def test_manifest_is_always_curiosity(proxy, nasa_calls):
    resp = await proxy.get("/api/mars-manifests", params={"rover": "spirit"})
    assert (await resp.json())["photo_manifest"]["name"] == "Curiosity"
    assert nasa_calls[0][0] == "/mars-photos/api/v1/manifests/curiosity"


async def test_neo_forwards_date_range(proxy, nasa_calls):
    resp = await proxy.get("/api/neo", params={"start_date": "2024-01-01", "end_date": "2024-01-07"})
    assert resp.status == 200
    assert nasa_calls[0] == (
        "/neo/rest/v1/feed",
        {"api_key": "TESTKEY", "start_date": "2024-01-01", "end_date": "2024-01-07"},
    )


async def test_images_default_query_and_no_key(proxy, nasa_calls):
    resp = await proxy.get("/api/images")
    assert resp.status == 200
    assert nasa_calls[0] == ("/search", {"q": "space", "media_type": "image", "page": "1"})


async def test_epic_selects_path_by_date(proxy, nasa_calls):
    await proxy.get("/api/epic")
    resp = await proxy.get("/api/epic", params={"date": "2024-01-01"})
    assert (await resp.json())[0]["date"] == "2024-01-01"
    assert [path for path, _ in nasa_calls] == ["/EPIC/api/natural", "/EPIC/api/natural/date/2024-01-01"]


async def test_remote_error_keeps_status_and_message(proxy):
    resp = await proxy.get("/api/neo", params={"start_date": "bad"})
    assert resp.status == 400
    assert await resp.json() == {"error": "Date Format Exception", "status": 400}


async def test_unknown_remote_path_uses_generic_message(proxy_config):
    proxy_config.set("nasa_base_url", proxy_config.nasa_base_url + "/missing")
    async with test_utils.TestClient(test_utils.TestServer(create_app(proxy_config))) as client:
        resp = await client.get("/api/apod")
        assert resp.status == 404
        assert await resp.json() == {"error": "NASA API Error", "status": 404}


async def test_transport_failure_hides_detail():
    config = Config(use_env=False)
    config.update({"nasa_base_url": f"http://127.0.0.1:{test_utils.unused_port()}", "request_timeout": 2})
    async with test_utils.TestClient(test_utils.TestServer(create_app(config))) as client:
        resp = await client.get("/api/apod")
        assert resp.status == 500
        assert await resp.json() == {"error": "Network error occurred", "status": 500}


async def test_health(proxy, nasa_calls):
    resp = await proxy.get("/api/health")
    body = await resp.json()
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")
    assert nasa_calls == []


async def test_cors_headers_and_preflight(proxy):
    resp = await proxy.get("/api/health")
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    resp = await proxy.options("/api/apod")
    assert resp.status == 204
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


async def test_cors_headers_on_routing_errors(proxy):
    resp = await proxy.get("/api/unknown")
    assert resp.status == 404
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    resp = await proxy.post("/api/apod")
    assert resp.status == 405
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


async def test_neo_section_through_the_proxy(proxy):
    base = f"http://{proxy.server.host}:{proxy.server.port}/api"
    async with ExplorerAPI(base) as api:
        section = NeoSection(api)
        await section.set_params(start_date="2024-01-01", end_date="2024-01-02")
        assert section.state is SectionState.LOADED
        assert section.stats.total == 1
        assert section.objects[0]["id"] == "3542519"

        await section.set_params(start_date="bad")
        assert section.state is SectionState.ERROR
        assert section.error == "Date Format Exception"
        assert section.payload is None
