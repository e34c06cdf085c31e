"""Legality checks for linking two communications components."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .enums import Role
from .models import Component, NetworkGroup, SubMasterMember, UnitID
from .profile import UnitC3Profile
from .query import (
    find_master_network,
    find_peer_network,
    is_unit_master_connected,
    is_unit_slave_connected,
)
from .rules_config import DEFAULT_RULES, RulesConfig

LEGAL_ROLE_PAIRS = frozenset(
    {
        (Role.MASTER, Role.SLAVE),
        (Role.SLAVE, Role.MASTER),
        (Role.MASTER, Role.MASTER),
        (Role.PEER, Role.PEER),
    }
)


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    """Outcome of a proposed connection."""

    valid: bool
    reason: str | None = None


ALLOWED = ConnectionCheck(True)


def are_components_compatible(a: Component, b: Component) -> bool:
    """Same network class and a legal role pairing."""

    if a.network_class != b.network_class:
        return False
    return (a.role, b.role) in LEGAL_ROLE_PAIRS


def is_pin_disabled(
    profile: UnitC3Profile, comp_index: int, networks: Sequence[NetworkGroup]
) -> bool:
    """Master and slave pins of one unit exclude each other while in use."""

    role = profile.role_of(comp_index)
    if role is Role.MASTER:
        return is_unit_slave_connected(profile.unit_id, networks)
    if role is Role.SLAVE:
        return is_unit_master_connected(profile.unit_id, networks)
    return False


def can_connect(
    source: UnitC3Profile | None,
    source_index: int,
    target: UnitC3Profile | None,
    target_index: int,
    networks: Sequence[NetworkGroup],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> ConnectionCheck:
    """Decide whether the source pin may be linked to the target pin.

    An immediate reverse master-to-master edge is not a rejection: the
    mutator tears it down so the dragged-from pin becomes the parent.
    """

    if source is None or target is None:
        return ConnectionCheck(False, "unknown unit")
    source_comp = source.component(source_index)
    target_comp = target.component(target_index)
    if source_comp is None or target_comp is None:
        return ConnectionCheck(False, "unknown component")
    if source.unit_id == target.unit_id:
        return ConnectionCheck(False, "cannot link a unit to itself")
    if source_comp.network_class != target_comp.network_class:
        return ConnectionCheck(False, "incompatible network types")
    if (source_comp.role, target_comp.role) not in LEGAL_ROLE_PAIRS:
        return ConnectionCheck(
            False, f"cannot link a {source_comp.role} pin to a {target_comp.role} pin"
        )
    if is_pin_disabled(target, target_index, networks):
        return ConnectionCheck(False, "target pin is disabled")
    if is_pin_disabled(source, source_index, networks):
        return ConnectionCheck(False, "source pin is disabled")

    c3 = rules.c3
    if c3.enforce_network_limits:
        check = _check_capacity(source, source_comp, target, target_comp, networks, rules)
        if not check.valid:
            return check

    if (
        c3.detect_hierarchy_cycles
        and source_comp.role is Role.MASTER
        and target_comp.role is Role.MASTER
        and _reaches(
            (target.unit_id, target_index), (source.unit_id, source_index), networks
        )
    ):
        return ConnectionCheck(False, "link would create a loop in the master hierarchy")

    return ALLOWED


def _check_capacity(
    source: UnitC3Profile,
    source_comp: Component,
    target: UnitC3Profile,
    target_comp: Component,
    networks: Sequence[NetworkGroup],
    rules: RulesConfig,
) -> ConnectionCheck:
    limit = rules.c3.network_limits.get(source_comp.network_class)
    if limit is None:
        return ALLOWED

    if source_comp.role is Role.PEER:
        peers = {source.unit_id, target.unit_id}
        for unit_id in (source.unit_id, target.unit_id):
            network = find_peer_network(unit_id, networks, source_comp.network_class)
            if network is not None:
                peers.update(network.peer_ids)
        if len(peers) > limit:
            return ConnectionCheck(False, f"network is full (max {limit} units)")
        return ALLOWED

    if source_comp.role is Role.MASTER:
        master_id, master_index, member_id = source.unit_id, source_comp.index, target.unit_id
    else:
        master_id, master_index, member_id = target.unit_id, target_comp.index, source.unit_id
    network = find_master_network(master_id, master_index, networks)
    if network is None:
        return ALLOWED
    if any(member.unit_id == member_id for member in network.members):
        return ALLOWED
    if len(network.members) >= limit:
        return ConnectionCheck(False, f"network is full (max {limit} units)")
    return ALLOWED


def _reaches(
    start: tuple[UnitID, int],
    goal: tuple[UnitID, int],
    networks: Sequence[NetworkGroup],
) -> bool:
    """Whether ``goal`` is a descendant pin of ``start``.

    The direct edge ``start -> goal`` is skipped; it is the reverse edge the
    mutator removes before relinking.
    """

    pending = [start]
    seen = {start}
    while pending:
        pin = pending.pop()
        network = find_master_network(pin[0], pin[1], networks)
        if network is None:
            continue
        for member in network.members:
            if not isinstance(member, SubMasterMember):
                continue
            child = (member.unit_id, member.comp_index)
            if pin == start and child == goal:
                continue
            if child == goal:
                return True
            if child not in seen:
                seen.add(child)
                pending.append(child)
    return False


def valid_target_pins(
    source: UnitC3Profile,
    source_index: int,
    profiles: Iterable[UnitC3Profile],
    networks: Sequence[NetworkGroup],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> dict[UnitID, list[int]]:
    """Pins on other units that the source pin could currently connect to."""

    source_comp = source.component(source_index)
    if source_comp is None:
        return {}
    result: dict[UnitID, list[int]] = {}
    for profile in profiles:
        pins = [
            component.index
            for component in profile.components
            if are_components_compatible(source_comp, component)
            and can_connect(
                source, source_index, profile, component.index, networks, rules=rules
            ).valid
        ]
        if pins:
            result[profile.unit_id] = pins
    return result
