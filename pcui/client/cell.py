"""
Cell Client.

Control-plane operations on one Cell. Entity sets live under
`<cell>/__ctl/<EntitySet>`; each operation returns an OperationResult.
"""

import json
from typing import Any

from pcui.client.result import OperationResult
from pcui.client.session import Session
from pcui.client.transport import HttpMethod, TransportAdapter
from pcui.client.webdav import ALLPROP_BODY
from pcui.core.exceptions import MalformedResponseError
from pcui.core.utils import ms_date_to_local


def format_box_entities(data: Any) -> str:
    """
    Render an OData Box collection as `<updated>\\t<Name>\\t<Schema>` lines.

    Entities keep the server's order.

    Raises:
        MalformedResponseError: If the body is not an OData result collection
    """
    try:
        results = data["d"]["results"]
    except (KeyError, TypeError) as e:
        raise MalformedResponseError("Box collection without d.results") from e
    if not isinstance(results, list):
        raise MalformedResponseError("Box collection d.results is not a list")

    lines = []
    for entity in results:
        try:
            updated = ms_date_to_local(entity["__updated"])
            name = entity["Name"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Box entity without {e}") from e
        schema = entity.get("Schema") or ""
        lines.append(f"{updated}\t{name}\t{schema}\n")
    return "".join(lines)


class CellClient:
    """Operations on the Cell a Session is logged in to."""

    def __init__(self, session: Session, transport: TransportAdapter) -> None:
        self.session = session
        self.transport = transport

    @property
    def url(self) -> str:
        return self.session.url

    def _ctl(self, entity_set: str) -> str:
        return f"{self.url}/__ctl/{entity_set}"

    def _call(self, command: str, method: HttpMethod, url: str, body: Any = None) -> OperationResult:
        return self.transport.call(command, method, url, token=self.session.token, body=body)

    def _list(self, command: str, entity_set: str) -> OperationResult:
        return self._call(command, HttpMethod.GET, self._ctl(entity_set))

    def list_boxes(self) -> OperationResult:
        return self._list("ls", "Box")

    def list_boxes_formatted(self) -> OperationResult:
        result = self._list("sl", "Box")
        if result.failed:
            return result
        try:
            return result.with_message(format_box_entities(json.loads(result.message)))
        except (ValueError, MalformedResponseError) as e:
            return OperationResult.failure(result.url, "sl", e)

    def list_ext_cells(self) -> OperationResult:
        return self._list("extcell", "ExtCell")

    def list_relations(self) -> OperationResult:
        return self._list("relation", "Relation")

    def list_roles(self) -> OperationResult:
        return self._list("role", "Role")

    def list_ext_roles(self) -> OperationResult:
        return self._list("extrole", "ExtRole")

    def list_accounts(self) -> OperationResult:
        return self._list("account", "Account")

    def list_received_messages(self) -> OperationResult:
        return self._list("rcvmessage", "ReceivedMessage")

    def list_sent_messages(self) -> OperationResult:
        return self._list("sntmessage", "SentMessage")

    def create_box(self, name: str) -> OperationResult:
        """Create a Box whose schema URL is `<cell>/<name>/`."""
        body = {"Name": name, "Schema": f"{self.url}/{name}/"}
        return self._call("mk", HttpMethod.POST, self._ctl("Box"), body)

    def delete_box(self, name: str) -> OperationResult:
        return self._call("rm", HttpMethod.DELETE, self._ctl(f"Box('{name}')"))

    def acl(self) -> OperationResult:
        """PROPFIND the Cell root; the raw multistatus XML carries the ACL."""
        return self._call("acl", HttpMethod.PROPFIND, self.url, ALLPROP_BODY)
