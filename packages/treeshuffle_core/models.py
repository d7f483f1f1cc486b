"""Data model shared by the randomizer stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .classes import ACTS, MAX_PLAYERS

FIDELITY_MODES = ("minimal", "normal")


@dataclass(frozen=True)
class GridSlot:
    row: int
    col: int
    filled: bool
    skill: Optional[str] = None


@dataclass(frozen=True)
class LayoutPage:
    """Donor grid template: one page of one origin class."""

    class_code: str
    class_name: str
    page_index: int
    slots: tuple[GridSlot, ...]

    @property
    def key(self) -> tuple[str, int]:
        return (self.class_code, self.page_index)

    @property
    def filled_slots(self) -> list[GridSlot]:
        return sorted((s for s in self.slots if s.filled), key=lambda s: (s.row, s.col))


@dataclass(frozen=True)
class SkillDefinition:
    name: str
    skill_id: int
    charclass: str
    skilldesc: str
    reqlevel: int
    formulas: tuple[tuple[str, str], ...] = ()
    weapon_types: tuple[tuple[str, str], ...] = ()
    required_capabilities: frozenset[str] = frozenset()

    @property
    def pinned(self) -> bool:
        return bool(self.required_capabilities)

    def formula(self, column: str) -> str:
        for name, value in self.formulas:
            if name == column:
                return value
        return ""


@dataclass(frozen=True)
class SkillDescriptor:
    key: str
    page: int
    row: int
    col: int
    icon_index: int
    str_name: str
    synergy_refs: tuple[str, ...] = ()


@dataclass(frozen=True)
class Placement:
    skill: SkillDefinition
    target_class: str
    page: LayoutPage
    tab: int
    row: int
    col: int
    icon_index: int
    rank: int


@dataclass(frozen=True)
class PrerequisiteEdge:
    skill: str
    req1: str = ""
    req2: str = ""


@dataclass
class SynergyRewrite:
    skill: str
    formulas: dict[str, str] = field(default_factory=dict)
    display_refs: Optional[list[str]] = None


@dataclass(frozen=True)
class ActPermutation:
    """``order[i]`` is the original act now played at difficulty slot ``i + 1``."""

    order: tuple[int, ...]

    def __post_init__(self) -> None:
        if sorted(self.order) != list(ACTS):
            raise ValueError(f"Act order must be a permutation of {list(ACTS)}: {self.order}")

    def slot_of(self, act: int) -> int:
        return self.order.index(act) + 1

    def act_at(self, slot: int) -> int:
        return self.order[slot - 1]

    @property
    def is_identity(self) -> bool:
        return self.order == ACTS


@dataclass(frozen=True)
class RandomizerOptions:
    seed: Any
    enable_prereqs: bool = True
    fidelity: str = "minimal"
    players_count: int = 1
    players_acts: tuple[int, ...] = ACTS
    act_shuffle: bool = False
    starting_staff: bool = False
    staff_level: int = 1

    def normalized(self, resolved_seed: int) -> "RandomizerOptions":
        players = min(MAX_PLAYERS, max(1, int(self.players_count or 1)))
        acts = tuple(sorted({int(a) for a in self.players_acts if int(a) in ACTS}))
        if players <= 1:
            acts = ACTS
        fidelity = self.fidelity if self.fidelity in FIDELITY_MODES else "minimal"
        staff_level = max(1, int(self.staff_level or 1)) if self.starting_staff else 0
        return RandomizerOptions(
            seed=resolved_seed,
            enable_prereqs=bool(self.enable_prereqs),
            fidelity=fidelity,
            players_count=players,
            players_acts=acts,
            act_shuffle=bool(self.act_shuffle),
            starting_staff=bool(self.starting_staff),
            staff_level=staff_level,
        )

    def cache_key(self) -> tuple[Any, ...]:
        return (
            self.seed,
            self.enable_prereqs,
            self.fidelity,
            self.players_count,
            self.players_acts,
            self.act_shuffle,
            self.starting_staff,
            self.staff_level,
        )


@dataclass
class RandomizerResult:
    seed: int
    options: RandomizerOptions
    placements: list[Placement]
    tables: dict[str, Any] = field(default_factory=dict)
    strings: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    sprites: dict[str, bytes] = field(default_factory=dict)
    preview: dict[str, Any] = field(default_factory=dict)
    act_order: Optional[tuple[int, ...]] = None
    warnings: list[str] = field(default_factory=list)
