"""HTTP and WebSocket endpoints relaying drone traffic through the message broker."""

import asyncio
import contextlib
import json

from aiohttp import WSMsgType, web

from . import logger
from .broker import connect
from .messages import (
    Coordinates,
    RequestError,
    Result,
    channel_for,
    decode_request,
    encode_result,
)
from .response import Code, message

COORDS_CHANNEL = "coors"
DRONE_INFO_CHANNEL = "drone_info"
RUNNING_STATUS_CHANNEL = "running_status"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 32223

BROKER_FACTORY = web.AppKey("broker_factory")


async def _forward(broker, channel, ws, lock):
    """Send every payload published on ``channel`` to ``ws``."""
    try:
        async with contextlib.aclosing(broker.subscribe(channel)) as payloads:
            async for payload in payloads:
                async with lock:
                    await ws.send_str(payload)
    except ConnectionError:
        return
    except Exception as exc:
        logger.error("Error subscribing to '%s' channel: %s", channel, exc)


@contextlib.asynccontextmanager
async def _session(request, channels):
    """Upgrade to a WebSocket, open a broker and forward ``channels`` to the socket."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    try:
        broker = await request.app[BROKER_FACTORY]()
    except Exception as exc:
        logger.error("Broker connection error: %s", exc)
        await ws.close()
        raise
    lock = asyncio.Lock()
    tasks = [asyncio.create_task(_forward(broker, ch, ws, lock)) for ch in channels]
    try:
        yield ws, broker
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await broker.close()
        await ws.close()


def _message_type(text):
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    kind = data.get("TYPE")
    if isinstance(kind, bool) or not isinstance(kind, (int, float)):
        raise ValueError("TYPE must be a number")
    return int(kind)


async def drone_handler(request):
    """Publish drone messages by their TYPE and send waypoints back to the drone."""
    async with _session(request, (COORDS_CHANNEL,)) as (ws, broker):
        async for msg in ws:
            if msg.type is not WSMsgType.TEXT:
                continue
            try:
                kind = _message_type(msg.data)
            except ValueError as exc:
                logger.error("JSON decode error: %s", exc)
                break
            try:
                channel = channel_for(kind)
            except ValueError:
                logger.warning("Unknown message TYPE %s", kind)
                continue
            try:
                await broker.publish(channel, msg.data)
            except Exception as exc:
                logger.error("Publish to '%s' failed: %s", channel, exc)
    return ws


async def frontend_handler(request):
    """Stream drone info and running status messages to a frontend client."""
    channels = (DRONE_INFO_CHANNEL, RUNNING_STATUS_CHANNEL)
    async with _session(request, channels) as (ws, _broker):
        async for _msg in ws:
            pass
    return ws


async def coords_handler(request):
    """Accept waypoint coordinates by POST and publish them to the drones."""
    if request.method != "POST":
        result = Result(Code.INVALID_PARAMS, message(Code.INVALID_PARAMS))
    else:
        try:
            coords = decode_request(await request.read(), Coordinates)
        except RequestError as exc:
            result = Result(exc.code, message(exc.code))
        else:
            broker = await request.app[BROKER_FACTORY]()
            try:
                await broker.publish(COORDS_CHANNEL, str(coords))
            except Exception as exc:
                logger.error("Publish coordinates failed: %s", exc)
            finally:
                await broker.close()
            result = Result(Code.SUCCESS, message(Code.SUCCESS))
    return web.Response(text=encode_result(result), content_type="application/json")


def create_app(broker_factory=None):
    """Build the application; ``broker_factory`` is an async callable returning a broker."""
    app = web.Application()
    app[BROKER_FACTORY] = broker_factory or connect
    app.router.add_get("/drone", drone_handler)
    app.router.add_get("/frontend", frontend_handler)
    app.router.add_route("*", "/coords", coords_handler)
    return app


def serve(host=DEFAULT_HOST, port=DEFAULT_PORT):
    """Run the gateway until interrupted."""
    web.run_app(create_app(), host=host, port=port)