"""
Navigation State.

Immutable value describing where the operator is: not logged in, in a Cell,
or inside one Box of that Cell. A `cd` produces a new state.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class Mode(Enum):
    UNAUTHENTICATED = "unauthenticated"
    CELL = "cell"
    BOX = "box"


class CellRef(BaseModel):
    url: str

    model_config = ConfigDict(frozen=True)


class BoxRef(BaseModel):
    cell_url: str
    name: str

    model_config = ConfigDict(frozen=True)

    @property
    def url(self) -> str:
        return f"{self.cell_url}/{self.name}"


class NavigationState(BaseModel):
    """
    Current mode plus the resources it refers to.

    Invariants:
        UNAUTHENTICATED has neither cell nor box
        CELL has a cell and no box
        BOX has a box whose parent is the current cell
    """

    mode: Mode
    cell: CellRef | None = None
    box: BoxRef | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_invariants(self) -> "NavigationState":
        if self.mode is Mode.UNAUTHENTICATED:
            if self.cell is not None or self.box is not None:
                raise ValueError("unauthenticated state cannot reference a Cell or Box")
        elif self.mode is Mode.CELL:
            if self.cell is None or self.box is not None:
                raise ValueError("Cell mode requires a Cell and no Box")
        else:
            if self.cell is None or self.box is None:
                raise ValueError("Box mode requires a Cell and a Box")
            if self.box.cell_url != self.cell.url:
                raise ValueError("Box does not belong to the current Cell")
        return self

    @classmethod
    def unauthenticated(cls) -> "NavigationState":
        return cls(mode=Mode.UNAUTHENTICATED)

    @classmethod
    def in_cell(cls, cell_url: str) -> "NavigationState":
        return cls(mode=Mode.CELL, cell=CellRef(url=cell_url))

    def enter_box(self, name: str) -> "NavigationState":
        return NavigationState(
            mode=Mode.BOX,
            cell=self.cell,
            box=BoxRef(cell_url=self.cell.url, name=name),
        )

    def leave_box(self) -> "NavigationState":
        return NavigationState(mode=Mode.CELL, cell=self.cell)

    @property
    def prompt(self) -> str:
        """Prompt text: `<cell_url>[/<box>]> `."""
        if self.cell is None:
            return "> "
        suffix = f"/{self.box.name}" if self.box is not None else ""
        return f"{self.cell.url}{suffix}> "
