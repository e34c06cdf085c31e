"""Dataclasses describing forces, units and their communications networks.

The rules layer operates purely on these in-memory types.  The persisted
JSON shape lives in :mod:`lancenet.domain.serialization`; persistence
adapters translate between the two.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import NewType

from .enums import NetworkClass, Role

# --- Strongly typed identifiers -------------------------------------------------

ForceID = NewType("ForceID", int)
UnitID = NewType("UnitID", str)
NetworkID = NewType("NetworkID", str)


# --- Unit data ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Equipment:
    """Mounted equipment entry taken from a unit's static definition."""

    name: str
    flags: frozenset[str] = frozenset()


@dataclass(slots=True)
class ForceUnit:
    """Unit as supplied by the force provider."""

    id: UnitID
    name: str
    bv: int
    c3_type: str | None = None
    linked: bool = False
    equipment: list[Equipment] = field(default_factory=list)
    specials: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Component:
    """Single communications slot ("pin") on a unit."""

    index: int
    role: Role
    network_class: NetworkClass
    boosted: bool = False


# --- Network members ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SlaveMember:
    """Unit attached to a master pin through its slave pin."""

    unit_id: UnitID


@dataclass(frozen=True, slots=True)
class SubMasterMember:
    """Master pin of another unit attached below a master pin."""

    unit_id: UnitID
    comp_index: int


MemberRef = SlaveMember | SubMasterMember


# --- Network groups -------------------------------------------------------------


@dataclass(slots=True)
class PeerNetwork:
    """Symmetric mesh of peer pins (C3i, naval C3, Nova CEWS)."""

    id: NetworkID
    network_class: NetworkClass
    color: str
    peer_ids: list[UnitID] = field(default_factory=list)


@dataclass(slots=True)
class MasterNetwork:
    """Members hanging off one master pin."""

    id: NetworkID
    network_class: NetworkClass
    color: str
    master_id: UnitID
    master_comp_index: int
    members: list[MemberRef] = field(default_factory=list)


NetworkGroup = PeerNetwork | MasterNetwork


# --- Aggregate ------------------------------------------------------------------


@dataclass(slots=True)
class Force:
    """Root aggregate owning units and their network topology."""

    id: ForceID
    name: str
    units: list[ForceUnit] = field(default_factory=list)
    networks: list[NetworkGroup] = field(default_factory=list)
    modified: bool = False
    listeners: list[Callable[[Force], None]] = field(
        default_factory=list, repr=False, compare=False
    )

    def unit(self, unit_id: str) -> ForceUnit | None:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    def mark_topology_changed(self) -> None:
        """Flag the force as modified and notify subscribers."""

        self.modified = True
        for listener in list(self.listeners):
            listener(self)
