"""
Navigation State Machine.

Turns one input line into one action against the active resource client and
returns the next NavigationState. State is passed in and returned, never
stored on the Navigator.

    UNAUTHENTICATED --login--> CELL --cd <box>--> BOX --cd ..--> CELL

`cd <box>` only enters the Box when `exists()` succeeds. Unknown input
prints the mode's notice and usage and leaves the state unchanged.
"""

from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from pcui.client.box import BoxClient
from pcui.client.cell import CellClient
from pcui.client.result import OperationResult, failure_message
from pcui.client.session import Session, login
from pcui.client.transport import TransportAdapter
from pcui.core.logging import get_logger, log_with_source
from pcui.shell.commands import (
    BoxCommand,
    CellCommand,
    parse_box_command,
    parse_cell_command,
)
from pcui.shell.messages import (
    BOX_CANNOT_DOWN,
    CELL_CANNOT_UP,
    UNUSUAL_BOX_COMMAND,
    UNUSUAL_CELL_COMMAND,
    USAGE_BOX,
    USAGE_CELL,
    MessageChannel,
)
from pcui.shell.state import Mode, NavigationState

logger = get_logger(__name__)

PARENT = ".."


class Step(NamedTuple):
    """Result of handling one line."""

    state: NavigationState
    running: bool = True


Handler = Callable[[NavigationState, str | None], Step]


class Navigator:
    """
    Dispatches parsed commands for the logged-in Session.

    Usage:
        navigator, state = Navigator.login(url, user, password, transport, channel)
        step = navigator.handle(state, "cd box1")
    """

    def __init__(
        self,
        session: Session,
        transport: TransportAdapter,
        channel: MessageChannel,
        download_dir: Path | None = None,
    ) -> None:
        self.session = session
        self.transport = transport
        self.channel = channel
        self.download_dir = download_dir or Path(".")
        self.cell = CellClient(session, transport)

        self._cell_handlers: dict[CellCommand, Handler] = {
            CellCommand.USERNAME: self._echo(lambda: self.session.username),
            CellCommand.TOKEN: self._echo(lambda: self.session.token),
            CellCommand.PWD: self._echo(self.session.pwd),
            CellCommand.LS: self._show(self.cell.list_boxes),
            CellCommand.SL: self._show(self.cell.list_boxes_formatted),
            CellCommand.EXTCELL: self._show(self.cell.list_ext_cells),
            CellCommand.RELATION: self._show(self.cell.list_relations),
            CellCommand.ROLE: self._show(self.cell.list_roles),
            CellCommand.EXTROLE: self._show(self.cell.list_ext_roles),
            CellCommand.ACCOUNT: self._show(self.cell.list_accounts),
            CellCommand.RCVMESSAGE: self._show(self.cell.list_received_messages),
            CellCommand.SNTMESSAGE: self._show(self.cell.list_sent_messages),
            CellCommand.CD: self._cell_cd,
            CellCommand.MK: self._cell_mk,
            CellCommand.RM: self._cell_rm,
            CellCommand.ACL: self._show(self.cell.acl),
            CellCommand.HELP: self._notice([USAGE_CELL]),
            CellCommand.QUIT: self._quit,
            CellCommand.UNKNOWN: self._notice([UNUSUAL_CELL_COMMAND, USAGE_CELL]),
        }
        self._box_handlers: dict[BoxCommand, Handler] = {
            BoxCommand.PWD: self._box_pwd,
            BoxCommand.LS: self._box_show(BoxClient.list),
            BoxCommand.SL: self._box_show(BoxClient.list_formatted),
            BoxCommand.URL: self._box_show(BoxClient.box_url_info),
            BoxCommand.META: self._box_show(BoxClient.meta),
            BoxCommand.CD: self._box_cd,
            BoxCommand.PUT: self._box_put,
            BoxCommand.GET: self._box_get,
            BoxCommand.RM: self._box_rm,
            BoxCommand.HELP: self._notice([USAGE_BOX]),
            BoxCommand.QUIT: self._quit,
            BoxCommand.UNKNOWN: self._notice([UNUSUAL_BOX_COMMAND, USAGE_BOX]),
        }

    @classmethod
    def login(
        cls,
        endpoint: str,
        username: str,
        password: str,
        transport: TransportAdapter,
        channel: MessageChannel,
        download_dir: Path | None = None,
    ) -> tuple["Navigator", NavigationState]:
        """
        Log in and enter Cell mode.

        Raises:
            AuthError: If the token exchange fails
        """
        session = login(endpoint, username, password, transport=transport)
        return cls(session, transport, channel, download_dir), NavigationState.in_cell(session.url)

    def handle(self, state: NavigationState, line: str) -> Step:
        """Handle one input line and return the next state."""
        line = line.strip()
        if not line:
            return Step(state)

        if state.mode is Mode.CELL:
            parsed = parse_cell_command(line)
            handler = self._cell_handlers[parsed.command]
        elif state.mode is Mode.BOX:
            parsed = parse_box_command(line)
            handler = self._box_handlers[parsed.command]
        else:
            self.channel.emit(["Not logged in."])
            return Step(state)

        log_with_source(
            logger,
            "shell",
            "debug",
            "Command",
            mode=state.mode.value,
            command=parsed.command.value,
            argument=parsed.argument,
        )
        return handler(state, parsed.argument)

    def box_client(self, state: NavigationState) -> BoxClient:
        return BoxClient(state.box.cell_url, state.box.name, self.session.token, self.transport)

    # -------------------------------------------------------------------------
    # Handler builders
    # -------------------------------------------------------------------------

    def _echo(self, value: Callable[[], str]) -> Handler:
        def handler(state: NavigationState, argument: str | None) -> Step:
            self.channel.emit([value()])
            return Step(state)
        return handler

    def _show(self, operation: Callable[[], OperationResult]) -> Handler:
        def handler(state: NavigationState, argument: str | None) -> Step:
            self.channel.emit_result(operation())
            return Step(state)
        return handler

    def _box_show(self, operation: Callable[[BoxClient], OperationResult]) -> Handler:
        def handler(state: NavigationState, argument: str | None) -> Step:
            self.channel.emit_result(operation(self.box_client(state)))
            return Step(state)
        return handler

    def _notice(self, lines: list[str]) -> Handler:
        def handler(state: NavigationState, argument: str | None) -> Step:
            self.channel.emit(lines)
            return Step(state)
        return handler

    def _quit(self, state: NavigationState, argument: str | None) -> Step:
        return Step(state, running=False)

    # -------------------------------------------------------------------------
    # Cell mode
    # -------------------------------------------------------------------------

    def _cell_cd(self, state: NavigationState, name: str | None) -> Step:
        if name == PARENT:
            self.channel.emit([CELL_CANNOT_UP])
            return Step(state)

        box = BoxClient(state.cell.url, name, self.session.token, self.transport)
        result = box.exists()
        self.channel.emit([result.url])
        if result.failed:
            self.channel.emit([result.message])
            return Step(state)

        log_with_source(logger, "shell", "info", "Entered Box", box_url=box.url)
        self.channel.emit([USAGE_BOX])
        return Step(state.enter_box(name))

    def _cell_mk(self, state: NavigationState, name: str | None) -> Step:
        self.channel.emit_result(self.cell.create_box(name))
        return Step(state)

    def _cell_rm(self, state: NavigationState, name: str | None) -> Step:
        self.channel.emit_result(self.cell.delete_box(name))
        return Step(state)

    # -------------------------------------------------------------------------
    # Box mode
    # -------------------------------------------------------------------------

    def _box_pwd(self, state: NavigationState, argument: str | None) -> Step:
        self.channel.emit([self.box_client(state).pwd()])
        return Step(state)

    def _box_cd(self, state: NavigationState, name: str | None) -> Step:
        if name != PARENT:
            self.channel.emit([BOX_CANNOT_DOWN])
            return Step(state)

        self.channel.emit([USAGE_CELL])
        return Step(state.leave_box())

    def _box_put(self, state: NavigationState, path_text: str | None) -> Step:
        path = Path(path_text).expanduser()
        if not path.is_file():
            self.channel.emit([f"{path_text} is not exist."])
            return Step(state)

        try:
            content = path.read_bytes()
        except OSError as e:
            self.channel.emit([failure_message("put", e)])
            return Step(state)

        self.channel.emit_result(self.box_client(state).put(path.name, content))
        return Step(state)

    def _box_get(self, state: NavigationState, file_name: str | None) -> Step:
        result = self.box_client(state).get(file_name)
        self.channel.emit([result.url])
        if result.failed:
            self.channel.emit([result.message])
            return Step(state)

        target = self.download_dir / Path(file_name).name
        try:
            target.write_bytes(result.content or b"")
        except OSError as e:
            self.channel.emit([failure_message("get", e)])
            return Step(state)

        log_with_source(logger, "shell", "info", "Downloaded file", url=result.url, path=str(target))
        return Step(state)

    def _box_rm(self, state: NavigationState, file_name: str | None) -> Step:
        self.channel.emit_result(self.box_client(state).remove(file_name))
        return Step(state)
