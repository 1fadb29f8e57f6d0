"""Unit tests for the navigation state machine against the fake Cell."""

import pytest

from pcui.core.exceptions import AuthError
from pcui.shell.commands import BoxCommand, CellCommand
from pcui.shell.messages import (
    BOX_CANNOT_DOWN,
    CELL_CANNOT_UP,
    UNUSUAL_BOX_COMMAND,
    UNUSUAL_CELL_COMMAND,
    USAGE_BOX,
    USAGE_CELL,
)
from pcui.shell.navigator import Navigator, Step
from pcui.shell.state import Mode, NavigationState

CELL_URL = "https://personium.example/alice"
ACCESS_TOKEN = "token-abc"
PASSWORD = "secret"

BOX_URL = f"{CELL_URL}/box1"


@pytest.fixture
def navigator(session, transport, channel, tmp_path) -> Navigator:
    return Navigator(session, transport, channel, download_dir=tmp_path)


@pytest.fixture
def cell_state() -> NavigationState:
    return NavigationState.in_cell(CELL_URL)


@pytest.fixture
def box_state(cell_state) -> NavigationState:
    return cell_state.enter_box("box1")


class TestLogin:
    def test_login_enters_cell_mode(self, transport, channel):
        navigator, state = Navigator.login(f"{CELL_URL}/", "alice", PASSWORD, transport, channel)

        assert state == NavigationState.in_cell(CELL_URL)
        assert navigator.session.token == ACCESS_TOKEN

    def test_bad_password_raises(self, transport, channel):
        with pytest.raises(AuthError):
            Navigator.login(CELL_URL, "alice", "wrong", transport, channel)


class TestDispatch:
    def test_every_command_has_a_handler(self, navigator):
        assert set(navigator._cell_handlers) == set(CellCommand)
        assert set(navigator._box_handlers) == set(BoxCommand)

    def test_blank_line_does_nothing(self, navigator, cell_state, channel):
        assert navigator.handle(cell_state, "   ") == Step(cell_state)
        assert channel.lines == []

    def test_unauthenticated_state_is_rejected(self, navigator, channel):
        state = NavigationState.unauthenticated()

        assert navigator.handle(state, "ls") == Step(state)
        assert channel.lines == ["Not logged in."]

    def test_quit_stops_in_both_modes(self, navigator, cell_state, box_state):
        assert navigator.handle(cell_state, "quit") == Step(cell_state, running=False)
        assert navigator.handle(box_state, "q") == Step(box_state, running=False)


class TestCellMode:
    def test_session_values(self, navigator, cell_state, channel):
        for line in ("username", "token", "pwd"):
            navigator.handle(cell_state, line)

        assert channel.lines == ["alice", ACCESS_TOKEN, CELL_URL]

    def test_help(self, navigator, cell_state, channel):
        navigator.handle(cell_state, "?")
        assert channel.lines == [USAGE_CELL]

    def test_unknown_command_keeps_state(self, navigator, cell_state, channel):
        step = navigator.handle(cell_state, "put file.txt")

        assert step == Step(cell_state)
        assert channel.lines == [UNUSUAL_CELL_COMMAND, USAGE_CELL]

    def test_ls_prints_url_and_json(self, navigator, cell_state, channel):
        navigator.handle(cell_state, "ls")

        assert channel.lines[0] == f"{CELL_URL}/__ctl/Box"
        assert '"Name": "box1"' in channel.lines[1]

    def test_sl_prints_one_line_per_box(self, navigator, cell_state, channel):
        navigator.handle(cell_state, "sl")

        assert channel.lines[1].endswith(f"\tbox1\t{CELL_URL}/box1/\n")

    @pytest.mark.parametrize("line, entity_set", [
        ("extcell", "ExtCell"),
        ("relation", "Relation"),
        ("role", "Role"),
        ("extrole", "ExtRole"),
        ("account", "Account"),
        ("rcvmessage", "ReceivedMessage"),
        ("sntmessage", "SentMessage"),
    ])
    def test_entity_listings(self, navigator, cell_state, channel, line, entity_set):
        navigator.handle(cell_state, line)
        assert channel.lines[0] == f"{CELL_URL}/__ctl/{entity_set}"

    def test_acl(self, navigator, cell_state, channel, server):
        navigator.handle(cell_state, "acl")

        assert channel.lines[0] == CELL_URL
        assert server.requests[-1].method == "PROPFIND"

    def test_mk_and_rm(self, navigator, cell_state, channel, server):
        navigator.handle(cell_state, "mk box2")
        assert "box2" in server.boxes

        navigator.handle(cell_state, "rm box2")
        assert "box2" not in server.boxes
        assert channel.lines[-2:] == [f"{CELL_URL}/__ctl/Box('box2')", ""]

    def test_rm_missing_box_reports_failure(self, navigator, cell_state, channel):
        navigator.handle(cell_state, "rm nobox")
        assert channel.lines[-1] == "rm failed. <404 Not Found: Box not found.>"

    def test_cd_into_existing_box(self, navigator, cell_state, channel):
        step = navigator.handle(cell_state, "cd box1")

        assert step.state.mode is Mode.BOX
        assert step.state.box.url == BOX_URL
        assert channel.lines == [BOX_URL, USAGE_BOX]

    def test_cd_into_missing_box_keeps_state(self, navigator, cell_state, channel):
        step = navigator.handle(cell_state, "cd nobox")

        assert step == Step(cell_state)
        assert channel.lines == [f"{CELL_URL}/nobox", "exist failed. <404 Not Found: Box not found.>"]

    def test_cd_parent_from_cell(self, navigator, cell_state, channel):
        assert navigator.handle(cell_state, "cd ..") == Step(cell_state)
        assert channel.lines == [CELL_CANNOT_UP]


class TestBoxMode:
    def test_pwd(self, navigator, box_state, channel):
        navigator.handle(box_state, "pwd")
        assert channel.lines == [BOX_URL]

    def test_unknown_command_keeps_state(self, navigator, box_state, channel):
        assert navigator.handle(box_state, "mk box2") == Step(box_state)
        assert channel.lines == [UNUSUAL_BOX_COMMAND, USAGE_BOX]

    def test_cd_parent_returns_to_cell(self, navigator, box_state, cell_state, channel):
        assert navigator.handle(box_state, "cd ..") == Step(cell_state)
        assert channel.lines == [USAGE_CELL]

    def test_cd_deeper_is_refused(self, navigator, box_state, channel):
        assert navigator.handle(box_state, "cd sub") == Step(box_state)
        assert channel.lines == [BOX_CANNOT_DOWN]

    def test_url_and_meta(self, navigator, box_state, channel):
        navigator.handle(box_state, "url")
        navigator.handle(box_state, "meta")

        assert channel.lines[0] == f"{CELL_URL}/__box"
        assert channel.lines[2] == BOX_URL
        assert '"status": "ready"' in channel.lines[3]

    def test_ls_and_sl(self, navigator, box_state, channel, server):
        server.boxes["box1"]["a.txt"] = b"x"

        navigator.handle(box_state, "ls")
        navigator.handle(box_state, "sl")

        assert "multistatus" in channel.lines[1]
        listing = channel.lines[3].splitlines()
        assert listing[0].startswith("- ")
        assert listing[1].startswith("c ")
        assert listing[1].endswith("/alice/box1/a.txt")

    def test_put_missing_local_file(self, navigator, box_state, channel, server, tmp_path):
        missing = tmp_path / "nope.txt"

        navigator.handle(box_state, f"put {missing}")

        assert channel.lines == [f"{missing} is not exist."]
        assert server.boxes["box1"] == {}

    def test_put_then_get_round_trip(self, navigator, box_state, channel, server, tmp_path):
        source_dir = tmp_path / "upload"
        source_dir.mkdir()
        (source_dir / "a.txt").write_bytes(b"hello\x00world")

        navigator.handle(box_state, f"put {source_dir / 'a.txt'}")
        assert server.boxes["box1"]["a.txt"] == b"hello\x00world"
        assert channel.lines[0] == f"{BOX_URL}/a.txt"

        navigator.handle(box_state, "get a.txt")
        assert (tmp_path / "a.txt").read_bytes() == b"hello\x00world"
        assert channel.lines[-1] == f"{BOX_URL}/a.txt"

    def test_get_missing_file(self, navigator, box_state, channel, tmp_path):
        navigator.handle(box_state, "get nope.txt")

        assert channel.lines == [f"{BOX_URL}/nope.txt", "get failed. <404 Not Found: File not found.>"]
        assert not (tmp_path / "nope.txt").exists()

    def test_rm_file(self, navigator, box_state, channel, server):
        server.boxes["box1"]["a.txt"] = b"x"

        navigator.handle(box_state, "rm a.txt")

        assert server.boxes["box1"] == {}
        assert channel.lines == [f"{BOX_URL}/a.txt", ""]
