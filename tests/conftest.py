import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from atlas_command_client import AtlasCommandHttpClient


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    body: Any = None


@dataclass
class AtlasRecorder:
    """Fake Atlas Command server that records every request it receives.

    Uploads answer ``{"object_id": "obj-123"}``, everything else
    ``{"success": True}``, unless a route is overridden with :meth:`respond`.
    Override factories may be plain callables or coroutine functions.
    """

    base_url: str = ""
    calls: List[RecordedRequest] = field(default_factory=list)
    overrides: Dict[Tuple[str, str], Callable[[web.Request], Any]] = field(
        default_factory=dict
    )

    @property
    def last(self) -> Optional[RecordedRequest]:
        return self.calls[-1] if self.calls else None

    def respond(
        self,
        method: str,
        path: str,
        factory: Callable[[web.Request], Any],
    ) -> None:
        self.overrides[(method, path)] = factory

    async def handle(self, request: web.Request) -> web.StreamResponse:
        body: Any = None
        if request.content_type == "multipart/form-data":
            form = await request.post()
            body = {}
            for key, value in form.items():
                if isinstance(value, web.FileField):
                    body[key] = {
                        "filename": value.filename,
                        "content_type": value.content_type,
                        "data": value.file.read(),
                    }
                else:
                    body[key] = value
        elif request.can_read_body:
            text = await request.text()
            body = json.loads(text) if text else None

        self.calls.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=dict(request.query),
                headers={key.lower(): value for key, value in request.headers.items()},
                body=body,
            )
        )

        factory = self.overrides.get((request.method, request.path))
        if factory is not None:
            response = factory(request)
            if inspect.isawaitable(response):
                response = await response
            return response
        if request.path == "/objects/upload":
            return web.json_response({"object_id": "obj-123"})
        return web.json_response({"success": True})


@pytest_asyncio.fixture
async def atlas_server():
    recorder = AtlasRecorder()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", recorder.handle)

    async with TestServer(app) as server:
        recorder.base_url = str(server.make_url("/"))
        yield recorder


@pytest_asyncio.fixture
async def atlas_client(atlas_server):
    client = AtlasCommandHttpClient(atlas_server.base_url, token="test-token")
    try:
        yield client
    finally:
        await client.aclose()
