#!/usr/bin/env python3
"""
NASA Space Explorer proxy server.

Forwards explorer requests to NASA's Open APIs, adding the API key. Bodies are
passed through verbatim; failures become ``{"error": ..., "status": ...}``.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""
import argparse
import logging
from datetime import datetime, timezone
from typing import Awaitable, Optional

from aiohttp import web

from nasa_explorer.client import NASAClient
from nasa_explorer.config import Config
from nasa_explorer.errors import NETWORK_ERROR_MESSAGE, ProxyUpstreamError, RemoteApiError

_LOG = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)8s | %(name)s | %(message)s"

CONFIG_KEY = web.AppKey("config", Config)
NASA_CLIENT_KEY = web.AppKey("nasa_client", NASAClient)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

routes = web.RouteTableDef()


def configure_logging(level: str = "INFO") -> None:
    """Apply the explorer log format and quiet the access log."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Allow the explorer front end to call the proxy from any origin."""
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        try:
            response = await handler(request)
        except web.HTTPException as ex:
            ex.headers.update(CORS_HEADERS)
            raise
    response.headers.update(CORS_HEADERS)
    return response


async def _forward(label: str, call: Awaitable) -> web.Response:
    """Await an upstream call and turn the outcome into the proxy's JSON reply."""
    try:
        data = await call
    except RemoteApiError as ex:
        return web.json_response({"error": ex.message, "status": ex.status}, status=ex.status)
    except ProxyUpstreamError as ex:
        _LOG.debug("Upstream failure for %s hidden from caller: %s", label, ex.detail)
        return web.json_response({"error": NETWORK_ERROR_MESSAGE, "status": 500}, status=500)
    return web.json_response(data)


@routes.get("/api/apod")
async def apod(request: web.Request) -> web.Response:
    query = request.query
    client = request.app[NASA_CLIENT_KEY]
    return await _forward("APOD", client.fetch_apod(
        date=query.get("date"),
        start_date=query.get("start_date"),
        end_date=query.get("end_date"),
        count=query.get("count"),
    ))


@routes.get("/api/mars-photos")
async def mars_photos(request: web.Request) -> web.Response:
    query = request.query
    client = request.app[NASA_CLIENT_KEY]
    return await _forward("Mars Photos", client.fetch_mars_photos(
        rover=query.get("rover"),
        page=query.get("page", 1),
        sol=query.get("sol"),
        earth_date=query.get("earth_date"),
        camera=query.get("camera"),
    ))


@routes.get("/api/mars-manifests")
async def mars_manifests(request: web.Request) -> web.Response:
    return await _forward("Mars Manifests", request.app[NASA_CLIENT_KEY].fetch_mars_manifest())


@routes.get("/api/neo")
async def neo(request: web.Request) -> web.Response:
    query = request.query
    client = request.app[NASA_CLIENT_KEY]
    return await _forward("NEO", client.fetch_neo_feed(
        start_date=query.get("start_date"),
        end_date=query.get("end_date"),
    ))


@routes.get("/api/images")
async def images(request: web.Request) -> web.Response:
    query = request.query
    client = request.app[NASA_CLIENT_KEY]
    return await _forward("NASA Images", client.search_images(
        q=query.get("q"),
        media_type=query.get("media_type"),
        page=query.get("page", 1),
    ))


@routes.get("/api/epic")
async def epic(request: web.Request) -> web.Response:
    client = request.app[NASA_CLIENT_KEY]
    return await _forward("EPIC", client.fetch_epic(date=request.query.get("date")))


@routes.get("/api/health")
async def health(request: web.Request) -> web.Response:
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return web.json_response({"status": "OK", "timestamp": timestamp})


async def _nasa_client_ctx(app: web.Application):
    client = app[NASA_CLIENT_KEY]
    async with client:
        yield


def create_app(config: Config, nasa_client: Optional[NASAClient] = None) -> web.Application:
    """Build the proxy application around one shared NASA client."""
    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config
    app[NASA_CLIENT_KEY] = nasa_client or NASAClient(config)
    app.add_routes(routes)
    app.cleanup_ctx.append(_nasa_client_ctx)
    return app


def main(argv=None) -> None:
    """Start the proxy server."""
    parser = argparse.ArgumentParser(description="NASA Space Explorer proxy server")
    parser.add_argument("--config", help="path to a JSON configuration file")
    parser.add_argument("--host", help="interface to bind")
    parser.add_argument("--port", type=int, help="port to listen on")
    args = parser.parse_args(argv)

    config = Config(args.config)
    if args.host:
        config.set("host", args.host)
    if args.port:
        config.set("port", args.port)

    configure_logging(config.log_level)
    _LOG.info("NASA Space Explorer server running on port %d", config.port)
    _LOG.info("Using NASA API Key: %s", "DEMO_KEY (Limited)" if config.using_demo_key else "Custom Key")

    web.run_app(create_app(config), host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
