"""
Box Client.

WebDAV and file operations on one Box, addressed as `<cell>/<box>`.
"""

from typing import Any
from urllib.parse import quote

from pcui.client.result import OperationResult
from pcui.client.transport import HttpMethod, TransportAdapter
from pcui.client.webdav import ALLPROP_BODY, format_listing, parse_multistatus
from pcui.core.exceptions import MalformedResponseError


class BoxClient:
    """Operations on a single Box of a Cell."""

    def __init__(self, cell_url: str, box_name: str, token: str, transport: TransportAdapter) -> None:
        self.cell_url = cell_url
        self.box_name = box_name
        self.token = token
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.cell_url}/{self.box_name}"

    def pwd(self) -> str:
        return self.url

    def _file_url(self, file_name: str) -> str:
        return f"{self.url}/{quote(file_name)}"

    def _call(self, command: str, method: HttpMethod, url: str, body: Any = None) -> OperationResult:
        return self.transport.call(command, method, url, token=self.token, body=body)

    def list(self) -> OperationResult:
        return self._call("ls", HttpMethod.PROPFIND, self.url, ALLPROP_BODY)

    def list_formatted(self) -> OperationResult:
        """List the Box with one `<marker> <updated> <href>` line per entry."""
        result = self._call("sl", HttpMethod.PROPFIND, self.url, ALLPROP_BODY)
        if result.failed:
            return result
        try:
            return result.with_message(format_listing(parse_multistatus(result.message)))
        except MalformedResponseError as e:
            return OperationResult.failure(result.url, "sl", e.message)

    def box_url_info(self) -> OperationResult:
        return self._call("url", HttpMethod.GET, f"{self.cell_url}/__box")

    def meta(self) -> OperationResult:
        return self._call("meta", HttpMethod.GET, self.url)

    def put(self, file_name: str, content: bytes) -> OperationResult:
        return self._call("put", HttpMethod.PUT, self._file_url(file_name), content)

    def get(self, file_name: str) -> OperationResult:
        """Download a file; the bytes are returned in `content`."""
        return self._call("get", HttpMethod.GET_FILE, self._file_url(file_name))

    def exists(self) -> OperationResult:
        """GET the Box root; a failed result means absent or inaccessible."""
        return self._call("exist", HttpMethod.GET, self.url)

    def remove(self, file_name: str) -> OperationResult:
        return self._call("rm", HttpMethod.DELETE, self._file_url(file_name))
