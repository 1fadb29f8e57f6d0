"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

The remote service is replaced by FakePersonium, an in-memory Cell served
through httpx.MockTransport. No test touches the network.
"""

import io
import json
from datetime import datetime, timedelta
from urllib.parse import parse_qs

import httpx
import pytest
from rich.console import Console

from pcui.client.session import Session
from pcui.client.transport import TransportAdapter
from pcui.shell.messages import MessageChannel

CELL_URL = "https://personium.example/alice"
ACCESS_TOKEN = "token-abc"
PASSWORD = "secret"

BOX_UPDATED_MS = 1500000000000
DAV_MODIFIED = "Fri, 14 Jul 2017 02:40:00 GMT"


def multistatus(base_path: str, files: dict[str, bytes]) -> str:
    """Build a PROPFIND reply: the collection itself, then one entry per file."""
    entries = [
        f"<response><href>{base_path}</href><propstat><prop>"
        f"<getlastmodified>{DAV_MODIFIED}</getlastmodified>"
        "<resourcetype><collection/></resourcetype>"
        "</prop><status>HTTP/1.1 200 OK</status></propstat></response>"
    ]
    for name in files:
        entries.append(
            f"<response><href>{base_path}/{name}</href><propstat><prop>"
            f"<getlastmodified>{DAV_MODIFIED}</getlastmodified>"
            "<resourcetype/>"
            "</prop><status>HTTP/1.1 200 OK</status></propstat></response>"
        )
    return '<?xml version="1.0" encoding="utf-8"?><multistatus xmlns="DAV:">' + "".join(entries) + "</multistatus>"


def _error(status: int, text: str) -> httpx.Response:
    return httpx.Response(status, json={"code": f"PR{status}", "message": {"lang": "en", "value": text}})


class FakePersonium:
    """In-memory Cell with Boxes and files, answering like the real server."""

    def __init__(self, cell_url: str = CELL_URL) -> None:
        self.cell_url = cell_url
        self.cell_path = httpx.URL(cell_url).path
        self.boxes: dict[str, dict[str, bytes]] = {"box1": {}}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(self.cell_path):
            return _error(404, "No such Cell.")
        rest = path[len(self.cell_path):].strip("/")

        if rest == "__token":
            return self._token(request)

        if request.headers.get("Authorization") != f"Bearer {ACCESS_TOKEN}":
            return _error(401, "Token expired.")

        if rest.startswith("__ctl/"):
            return self._control(request, rest[len("__ctl/"):])
        if rest == "__box":
            return httpx.Response(200, json={"Url": f"{self.cell_url}/box1/"})
        if rest == "":
            return httpx.Response(207, text=multistatus(self.cell_path, {}))

        box_name, _, file_name = rest.partition("/")
        if box_name not in self.boxes:
            return _error(404, "Box not found.")
        if file_name:
            return self._file(request, box_name, file_name)
        if request.method == "PROPFIND":
            return httpx.Response(207, text=multistatus(f"{self.cell_path}/{box_name}", self.boxes[box_name]))
        return httpx.Response(200, json={"box": {"name": box_name, "status": "ready"}})

    def _token(self, request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        if form.get("grant_type") != "password" or form.get("password") != PASSWORD:
            return _error(400, "Authentication failed.")
        return httpx.Response(200, json={
            "access_token": ACCESS_TOKEN,
            "expires_in": 3600,
            "token_type": "Bearer",
        })

    def _control(self, request: httpx.Request, entity: str) -> httpx.Response:
        if entity == "Box" and request.method == "POST":
            body = json.loads(request.content)
            self.boxes[body["Name"]] = {}
            return httpx.Response(201, json={"d": {"results": body}})
        if entity == "Box" and request.method == "GET":
            results = [
                {"Name": name, "Schema": f"{self.cell_url}/{name}/", "__updated": f"/Date({BOX_UPDATED_MS})/"}
                for name in self.boxes
            ]
            return httpx.Response(200, json={"d": {"results": results}})
        if entity.startswith("Box('") and request.method == "DELETE":
            name = entity[len("Box('"):-len("')")]
            if self.boxes.pop(name, None) is None:
                return _error(404, "Box not found.")
            return httpx.Response(204)
        return httpx.Response(200, json={"d": {"results": []}})

    def _file(self, request: httpx.Request, box_name: str, file_name: str) -> httpx.Response:
        files = self.boxes[box_name]
        if request.method == "PUT":
            files[file_name] = request.content
            return httpx.Response(201)
        if file_name not in files:
            return _error(404, "File not found.")
        if request.method == "DELETE":
            del files[file_name]
            return httpx.Response(204)
        return httpx.Response(200, content=files[file_name])


class RecordingChannel(MessageChannel):
    """MessageChannel that also keeps every emitted line."""

    def __init__(self) -> None:
        super().__init__(Console(file=io.StringIO(), width=200))
        self.lines: list[str] = []

    def emit(self, lines) -> None:
        lines = list(lines)
        self.lines.extend(lines)
        super().emit(lines)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def server() -> FakePersonium:
    """Fresh in-memory Cell with one empty Box named box1."""
    return FakePersonium()


@pytest.fixture
def transport(server: FakePersonium):
    """TransportAdapter wired to the fake server."""
    adapter = TransportAdapter(timeout=5.0, transport=server.transport())
    yield adapter
    adapter.close()


@pytest.fixture
def session() -> Session:
    """A Session as produced by a successful login."""
    return Session(
        url=CELL_URL,
        username="alice",
        token=ACCESS_TOKEN,
        expires_at=datetime(2030, 1, 1) + timedelta(hours=1),
    )


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()
