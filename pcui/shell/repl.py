"""
Interactive Shell Mode.

Provides the REPL: operation-log question, login prompts with the recent
Cell URL menu, then the Cell/Box command loop.
Uses Rich for output formatting and basic input handling.
"""

from rich.console import Console
from rich.panel import Panel

from pcui.client.transport import TransportAdapter
from pcui.core.config import AppConfig, get_app_config, get_proxy, resolve_project_path
from pcui.core.exceptions import AuthError
from pcui.core.logging import get_logger, log_with_source
from pcui.shell.history import RecentUrls
from pcui.shell.messages import (
    LOG_SAVE_QUESTION,
    LOGIN_RETRY,
    USAGE_CELL,
    MessageChannel,
    OperationLog,
)
from pcui.shell.navigator import Navigator
from pcui.shell.state import NavigationState

logger = get_logger(__name__)

QUIT_WORDS = frozenset({"quit", "q"})
YES_WORDS = frozenset({"yes", "y"})
NO_WORDS = frozenset({"no", "n"})


class QuitRequested(Exception):
    """Raised by a prompt when the operator types quit before logging in."""


class InteractiveShell:
    """
    Interactive shell for Cell and Box commands.

    Usage:
        shell = InteractiveShell()
        exit_code = shell.run()
    """

    def __init__(
        self,
        console: Console | None = None,
        config: AppConfig | None = None,
        log_save: bool | None = None,
        transport: TransportAdapter | None = None,
    ) -> None:
        """
        Initialize the interactive shell.

        Args:
            console: Rich console used for prompts and output
            config: Application configuration. If None, loads config/settings/.
            log_save: Preset answer to the operation-log question; None asks
            transport: HTTP adapter. If None, one is built with the environment proxy.
        """
        self.console = console or Console()
        self.config = config or get_app_config()
        self.log_save = log_save
        self.transport = transport

        app = self.config.application
        self.history = RecentUrls(resolve_project_path(app.history.path), app.history.max_entries)
        self.channel = MessageChannel(self.console)
        self.download_dir = resolve_project_path(app.downloads.directory)

    def run(self) -> int:
        """Run the shell and return the process exit code."""
        app = self.config.application
        self.console.print(Panel(
            f"[bold]This is the {app.name} {app.version} for manipulating personium.[/bold]\n"
            f"{app.description}\n\n"
            "* If you are using a proxy server,\n"
            "  please set the environment variable HTTP_proxy.",
            title="Welcome",
        ))

        owns_transport = self.transport is None
        if owns_transport:
            self.transport = TransportAdapter(proxy=get_proxy())

        try:
            if self._ask_log_save():
                self.channel.oplog = OperationLog(
                    resolve_project_path(app.oplog.directory),
                    app.oplog.prefix,
                )
            navigator, state = self._login()
            self._loop(navigator, state)
        except (QuitRequested, EOFError, KeyboardInterrupt):
            pass
        finally:
            if owns_transport:
                self.transport.close()

        log_with_source(logger, "shell", "info", "Shell exited")
        self.console.print("[dim]Goodbye![/dim]")
        return 0

    def _prompt(self, text: str, password: bool = False) -> str:
        """Read one non-empty answer; quit/q aborts before login (except as a password)."""
        while True:
            answer = self.console.input(f"{text}> ", markup=False, password=password).strip()
            if not answer:
                continue
            if answer in QUIT_WORDS and not password:
                raise QuitRequested
            return answer

    def _ask_log_save(self) -> bool:
        if self.log_save is not None:
            return self.log_save
        while True:
            answer = self._prompt(LOG_SAVE_QUESTION)
            if answer in YES_WORDS:
                return True
            if answer in NO_WORDS:
                return False

    def _ask_cell_url(self) -> str:
        urls = self.history.menu()
        menu = "Input your Cell URL"
        for number, url in enumerate(urls, start=1):
            menu += f"\n[{number}] {url}"

        while True:
            answer = self._prompt(menu)
            if answer.isdigit():
                index = int(answer)
                if 1 <= index <= len(urls):
                    return urls[index - 1]
                continue
            url = answer.rstrip("/")
            if url:
                return url

    def _login(self) -> tuple[Navigator, NavigationState]:
        while True:
            cell_url = self._ask_cell_url()
            username = self._prompt("Username")
            password = self._prompt("Password", password=True)

            self.channel.emit([f"Accessing {cell_url}/__token ..."])
            try:
                navigator, state = Navigator.login(
                    cell_url,
                    username,
                    password,
                    self.transport,
                    self.channel,
                    self.download_dir,
                )
            except AuthError:
                self.channel.emit([LOGIN_RETRY])
                continue

            try:
                self.history.save(navigator.session.url)
            except OSError as e:
                log_with_source(logger, "shell", "warning", "URL history not saved", error=str(e))
            return navigator, state

    def _loop(self, navigator: Navigator, state: NavigationState) -> None:
        self.channel.emit([USAGE_CELL])
        running = True
        while running:
            try:
                line = self.console.input(state.prompt, markup=False)
            except KeyboardInterrupt:
                self.console.print("\n[dim]Use 'quit' to exit[/dim]")
                continue
            state, running = navigator.handle(state, line)


def run_shell(log_save: bool | None = None) -> int:
    """Run the interactive shell."""
    shell = InteractiveShell(log_save=log_save)
    return shell.run()
