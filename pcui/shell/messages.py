"""
Message Channel.

Every line shown to the operator goes through MessageChannel, which prints it
with a `# ` prefix and, when the operation log is enabled, appends it to the
day's log file.
"""

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from rich.console import Console

from pcui.client.result import OperationResult
from pcui.core.logging import get_logger, log_with_source
from pcui.core.utils import DISPLAY_FORMAT

logger = get_logger(__name__)

USAGE_CELL = (
    "[Cell mode command] -> username, token, pwd, ls, sl, extcell, relation, role, "
    "extrole, account, rcvmessage, sntmessage, cd {Box}, mk {Box}, acl, rm {Box}, "
    "help(?), quit(q)"
)
USAGE_BOX = (
    "[Box mode command] -> pwd, ls, sl, meta, url, cd .., put {Path}, get {File}, "
    "rm {File}, help(?), quit(q)"
)
UNUSUAL_CELL_COMMAND = "Unusual Cell command."
UNUSUAL_BOX_COMMAND = "Unusual Box command."
CELL_CANNOT_UP = "Current path is Cell. Cannot up path."
BOX_CANNOT_DOWN = "Current path is Box. Cannot down path."
LOGIN_RETRY = "Login failed. Try again."
LOG_SAVE_QUESTION = "Do you want to save the operation log? (yes | no)"


class OperationLog:
    """Appends displayed lines to `<directory>/<prefix>YYYYMMDD.log`."""

    def __init__(self, directory: Path, prefix: str) -> None:
        self.directory = directory
        self.prefix = prefix

    def path_for(self, now: datetime) -> Path:
        return self.directory / f"{self.prefix}{now:%Y%m%d}.log"

    def write(self, lines: list[str], now: datetime | None = None) -> None:
        now = now or datetime.now()
        stamp = now.strftime(DISPLAY_FORMAT)
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.path_for(now), "a", encoding="utf-8") as f:
            for line in lines:
                f.write(f"[{stamp}] # {line}\n")


class MessageChannel:
    """
    Display and log sink for shell output.

    Usage:
        channel = MessageChannel(console)
        channel.emit([USAGE_CELL])
        channel.emit_result(cell.list_boxes())
    """

    def __init__(self, console: Console | None = None, oplog: OperationLog | None = None) -> None:
        self.console = console or Console()
        self.oplog = oplog

    def emit(self, lines: Iterable[str]) -> None:
        lines = list(lines)
        for line in lines:
            self.console.print(f"# {line}", markup=False, highlight=False, soft_wrap=True)

        if self.oplog is not None:
            try:
                self.oplog.write(lines)
            except OSError as e:
                log_with_source(
                    logger,
                    "shell",
                    "error",
                    "Operation log write failed",
                    path=str(self.oplog.directory),
                    error=str(e),
                )
                self.console.print(f"[red]Operation log write failed: {e}[/red]")

    def emit_result(self, result: OperationResult, with_message: bool = True) -> None:
        """Emit the target URL, followed by the message unless suppressed."""
        self.emit([result.url, result.message] if with_message else [result.url])
