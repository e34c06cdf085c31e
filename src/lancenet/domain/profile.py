"""Read-only communications profile of a unit.

A profile is derived once from a unit's static definition: every piece of
equipment carrying a C3 flag becomes a component ("pin") with a role and a
network class.  Units described only by Alpha Strike specials are profiled
from those instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .enums import (
    BOOSTED_FLAGS,
    FLAG_C3_BOOSTED_MASTER,
    FLAG_C3_BOOSTED_SLAVE,
    FLAG_C3_EMERGENCY_MASTER,
    FLAG_C3_MASTER,
    FLAG_C3_SLAVE,
    FLAG_C3I,
    FLAG_NAVAL_C3,
    FLAG_NOVA,
    MASTER_FLAGS,
    PEER_FLAGS,
    SLAVE_FLAGS,
    NetworkClass,
    Role,
)
from .models import Component, Equipment, ForceUnit, UnitID

NETWORK_EQUIVALENCE: dict[NetworkClass, frozenset[str]] = {
    NetworkClass.C3: frozenset(
        {
            "c3",
            "c3 master",
            "c3 boosted master",
            "c3 slave",
            "c3 boosted slave",
            "c3 emergency master",
            "bc3",
            FLAG_C3_MASTER.lower(),
            FLAG_C3_BOOSTED_MASTER.lower(),
            FLAG_C3_SLAVE.lower(),
            FLAG_C3_BOOSTED_SLAVE.lower(),
            FLAG_C3_EMERGENCY_MASTER.lower(),
        }
    ),
    NetworkClass.C3I: frozenset({"c3i", "improved c3", FLAG_C3I.lower()}),
    NetworkClass.NAVAL: frozenset({"naval", "naval c3", "nc3", FLAG_NAVAL_C3.lower()}),
    NetworkClass.NOVA: frozenset({"nova", "nova cews", FLAG_NOVA.lower()}),
}


def network_class_for(name: str | None) -> NetworkClass | None:
    """Resolve a hardware name or flag to its compatibility class."""

    if not name:
        return None
    key = name.strip().lower()
    for network_class, names in NETWORK_EQUIVALENCE.items():
        if key in names:
            return network_class
    return None


def are_classes_compatible(a: NetworkClass | None, b: NetworkClass | None) -> bool:
    return a is not None and a == b


# --- Alpha Strike specials ------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AlphaStrikeC3:
    """C3 capability parsed from an Alpha Strike special."""

    flag: str
    network_class: NetworkClass
    role: Role
    boosted: bool
    count: int


_AS_PATTERNS: tuple[tuple[re.Pattern[str], str, NetworkClass, Role, bool], ...] = (
    (re.compile(r"^C3BSS$"), FLAG_C3_BOOSTED_SLAVE, NetworkClass.C3, Role.SLAVE, True),
    (re.compile(r"^C3BSM(\d*)$"), FLAG_C3_BOOSTED_MASTER, NetworkClass.C3, Role.MASTER, True),
    (re.compile(r"^C3EM(\d*)$"), FLAG_C3_EMERGENCY_MASTER, NetworkClass.C3, Role.SLAVE, False),
    (re.compile(r"^C3M(\d*)$"), FLAG_C3_MASTER, NetworkClass.C3, Role.MASTER, False),
    (re.compile(r"^C3S$"), FLAG_C3_SLAVE, NetworkClass.C3, Role.SLAVE, False),
    (re.compile(r"^C3I$"), FLAG_C3I, NetworkClass.C3I, Role.PEER, False),
    (re.compile(r"^NC3$"), FLAG_NAVAL_C3, NetworkClass.NAVAL, Role.PEER, False),
    (re.compile(r"^NOVA$"), FLAG_NOVA, NetworkClass.NOVA, Role.PEER, False),
)


def parse_as_specials(specials: list[str]) -> list[AlphaStrikeC3]:
    """Extract C3 capabilities from Alpha Strike special ability strings."""

    results: list[AlphaStrikeC3] = []
    for special in specials:
        for pattern, flag, network_class, role, boosted in _AS_PATTERNS:
            match = pattern.match(special.strip())
            if match is None:
                continue
            digits = match.group(1) if match.groups() else ""
            count = int(digits) if digits else 1
            results.append(AlphaStrikeC3(flag, network_class, role, boosted, count))
            break
    return results


# --- Profile --------------------------------------------------------------------


def _role_for_flags(flags: frozenset[str]) -> Role | None:
    if flags & MASTER_FLAGS:
        return Role.MASTER
    if flags & SLAVE_FLAGS:
        return Role.SLAVE
    if flags & PEER_FLAGS:
        return Role.PEER
    return None


def _class_for_flags(flags: frozenset[str]) -> NetworkClass | None:
    for flag in sorted(flags):
        network_class = network_class_for(flag)
        if network_class is not None:
            return network_class
    return None


def components_from_equipment(equipment: list[Equipment]) -> tuple[Component, ...]:
    components: list[Component] = []
    for item in equipment:
        role = _role_for_flags(item.flags)
        network_class = _class_for_flags(item.flags)
        if role is None or network_class is None:
            continue
        components.append(
            Component(
                index=len(components),
                role=role,
                network_class=network_class,
                boosted=bool(item.flags & BOOSTED_FLAGS),
            )
        )
    return tuple(components)


def components_from_specials(specials: list[str]) -> tuple[Component, ...]:
    components: list[Component] = []
    for info in parse_as_specials(specials):
        copies = info.count if info.role is Role.MASTER else 1
        for _ in range(copies):
            components.append(
                Component(
                    index=len(components),
                    role=info.role,
                    network_class=info.network_class,
                    boosted=info.boosted,
                )
            )
    return tuple(components)


@dataclass(frozen=True, slots=True)
class UnitC3Profile:
    """Fixed communication components of one unit."""

    unit_id: UnitID
    components: tuple[Component, ...] = ()

    @classmethod
    def from_unit(cls, unit: ForceUnit) -> UnitC3Profile:
        components = components_from_equipment(unit.equipment)
        if not components and unit.specials:
            components = components_from_specials(unit.specials)
        return cls(unit_id=unit.id, components=components)

    @property
    def has_c3(self) -> bool:
        return bool(self.components)

    def component(self, index: int) -> Component | None:
        if 0 <= index < len(self.components):
            return self.components[index]
        return None

    def role_of(self, index: int) -> Role | None:
        component = self.component(index)
        return component.role if component is not None else None

    @property
    def master_components(self) -> tuple[Component, ...]:
        return tuple(c for c in self.components if c.role is Role.MASTER)
