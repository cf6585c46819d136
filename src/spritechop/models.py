from dataclasses import dataclass, field
from typing import List, Optional, Union


def _optional(value: Optional[str]) -> Optional[str]:
    # "" and None both mean the field is absent
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class Emit:
    id: int
    form: Optional[str] = None


@dataclass(frozen=True)
class Skip:
    count: int = 1

    def __post_init__(self):
        if self.count < 1:
            raise ValueError(f"Skip count must be at least 1, got {self.count}")

    @classmethod
    def from_raw(cls, skip_count: Optional[int]) -> "Skip":
        """A zero or missing skip_count still consumes one grid slot."""
        return cls(count=skip_count or 1)


SpriteEntry = Union[Emit, Skip]


def entry_from_dict(raw: dict) -> SpriteEntry:
    if raw.get("skip", False):
        return Skip.from_raw(raw.get("skip_count"))
    return Emit(id=int(raw["id"]), form=_optional(raw.get("form")))


@dataclass
class SheetDescription:
    source_image_path: str
    columns: int
    rows: int
    outline_size: int = 0
    padding: int = 0
    suffix: Optional[str] = None
    entries: List[SpriteEntry] = field(default_factory=list)

    def __post_init__(self):
        if self.columns <= 0 or self.rows <= 0:
            raise ValueError(f"columns and rows must be positive, got {self.columns}x{self.rows}")
        if self.outline_size < 0 or self.padding < 0:
            raise ValueError("outline_px_size and padding_px_size must not be negative")
        self.suffix = _optional(self.suffix)

    @classmethod
    def from_dict(cls, raw: dict) -> "SheetDescription":
        return cls(
            source_image_path=raw["filename"],
            columns=int(raw["columns"]),
            rows=int(raw["rows"]),
            outline_size=int(raw.get("outline_px_size") or 0),
            padding=int(raw.get("padding_px_size") or 0),
            suffix=raw.get("suffix"),
            entries=[entry_from_dict(p) for p in raw.get("pokemon") or []],
        )

    @property
    def slot_count(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True)
class StyleRule:
    token: str
    width: int
    height: int
    offset_x: int
    offset_y: int
    form: Optional[str] = None
    game_family: Optional[str] = None
    color: Optional[str] = None

    @property
    def shiny(self) -> bool:
        return self.color == "shiny"

    @property
    def source_rect(self) -> Rect:
        # background-position is the negated offset of the sprite in the sheet
        return Rect(-self.offset_x, -self.offset_y, self.width, self.height)


@dataclass(frozen=True)
class ResolvedIdentity:
    base_token: str
    suffix: Optional[str] = None
    form: Optional[str] = None
    game_family: Optional[str] = None
    shiny: bool = False
