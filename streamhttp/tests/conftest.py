from __future__ import annotations

import asyncio
import socket
import threading
import time
from typing import Dict, Iterator, List

import pytest
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response
from pydantic import BaseModel

ECHO_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "PURGE"]


class EchoOut(BaseModel):
    """What the echo endpoint saw."""

    method: str
    path: str
    query: Dict[str, List[str]]
    headers: Dict[str, str]
    cookies: Dict[str, str]
    body: str


def create_echo_app() -> FastAPI:
    app = FastAPI(title="streamhttp test server")

    @app.api_route("/echo", methods=ECHO_METHODS)
    async def echo(request: Request):
        if request.method == "HEAD":
            return Response(status_code=200, headers={"X-Echo-Query": request.url.query})
        body = await request.body()
        out = EchoOut(
            method=request.method,
            path=request.url.path,
            query={k: request.query_params.getlist(k) for k in request.query_params.keys()},
            headers=dict(request.headers),
            cookies=dict(request.cookies),
            body=body.decode("utf-8", errors="replace"),
        )
        return JSONResponse(out.model_dump())

    @app.get("/status/{code}")
    async def status(code: int):
        return PlainTextResponse(f"status {code}", status_code=code)

    @app.get("/redirect")
    async def redirect():
        return RedirectResponse("/echo?from=redirect", status_code=302)

    @app.get("/chain/{remaining}")
    async def chain(remaining: int):
        # `remaining` more redirects before the echo endpoint.
        target = f"/chain/{remaining - 1}" if remaining > 1 else "/echo?from=chain"
        return RedirectResponse(target, status_code=302)

    @app.get("/cookies")
    async def cookies():
        resp = PlainTextResponse("cookies")
        resp.set_cookie("a", "1")
        resp.set_cookie("b", "2")
        return resp

    @app.get("/xml")
    async def xml():
        return Response(
            content=b"<items><item id='1'>one</item></items>", media_type="application/xml"
        )

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(1.0)
        return PlainTextResponse("late")

    return app


class _ThreadedServer(uvicorn.Server):
    # Signal handlers can only be installed from the main thread.
    def install_signal_handlers(self) -> None:
        pass


@pytest.fixture(scope="session")
def live_server() -> Iterator[str]:
    """Run the echo app on a loopback port; yields its base URL."""

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]

    config = uvicorn.Config(create_echo_app(), log_level="warning", lifespan="off")
    server = _ThreadedServer(config)
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline or not thread.is_alive():
            raise RuntimeError("test server failed to start")
        time.sleep(0.05)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=5)
    sock.close()


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""

    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
