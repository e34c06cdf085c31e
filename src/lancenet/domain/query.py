"""Read-only lookups over a force's network collection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .enums import NetworkClass, Role
from .models import (
    MasterNetwork,
    MemberRef,
    NetworkGroup,
    PeerNetwork,
    SlaveMember,
    SubMasterMember,
    UnitID,
)
from .profile import UnitC3Profile

MEMBER_SEPARATOR = ":"


# --- Member encoding ------------------------------------------------------------


def parse_member(raw: str) -> MemberRef:
    """Decode a persisted member string.

    ``"unit"`` is a slave member and ``"unit:2"`` a sub-master member.  A
    suffix that is not made of ASCII digits leaves the whole string as the id
    of a slave member.
    """

    unit_id, separator, suffix = raw.rpartition(MEMBER_SEPARATOR)
    if separator and unit_id and suffix.isascii() and suffix.isdigit():
        return SubMasterMember(UnitID(unit_id), int(suffix))
    return SlaveMember(UnitID(raw))


def create_master_member(unit_id: str, comp_index: int) -> str:
    return f"{unit_id}{MEMBER_SEPARATOR}{comp_index}"


def encode_member(member: MemberRef) -> str:
    if isinstance(member, SubMasterMember):
        return create_master_member(member.unit_id, member.comp_index)
    return member.unit_id


# --- Lookups --------------------------------------------------------------------


def find_network(network_id: str, networks: Iterable[NetworkGroup]) -> NetworkGroup | None:
    for network in networks:
        if network.id == network_id:
            return network
    return None


def find_master_network(
    unit_id: str, comp_index: int, networks: Iterable[NetworkGroup]
) -> MasterNetwork | None:
    for network in networks:
        if (
            isinstance(network, MasterNetwork)
            and network.master_id == unit_id
            and network.master_comp_index == comp_index
        ):
            return network
    return None


def find_peer_network(
    unit_id: str,
    networks: Iterable[NetworkGroup],
    network_class: NetworkClass | None = None,
) -> PeerNetwork | None:
    for network in networks:
        if not isinstance(network, PeerNetwork) or unit_id not in network.peer_ids:
            continue
        if network_class is None or network.network_class == network_class:
            return network
    return None


def find_parent_network(
    member: MemberRef, networks: Iterable[NetworkGroup]
) -> MasterNetwork | None:
    """Return the master network listing ``member``, if any."""

    for network in networks:
        if isinstance(network, MasterNetwork) and member in network.members:
            return network
    return None


def get_top_level_networks(networks: Sequence[NetworkGroup]) -> list[NetworkGroup]:
    """Peer networks plus master networks that are not nested under another."""

    nested = {
        (member.unit_id, member.comp_index)
        for network in networks
        if isinstance(network, MasterNetwork)
        for member in network.members
        if isinstance(member, SubMasterMember)
    }
    return [
        network
        for network in networks
        if isinstance(network, PeerNetwork)
        or (network.master_id, network.master_comp_index) not in nested
    ]


def find_sub_networks(
    network: NetworkGroup, networks: Sequence[NetworkGroup]
) -> list[MasterNetwork]:
    """Master networks rooted at each sub-master of ``network`` (one level)."""

    if not isinstance(network, MasterNetwork):
        return []
    children: list[MasterNetwork] = []
    for member in network.members:
        if not isinstance(member, SubMasterMember):
            continue
        child = find_master_network(member.unit_id, member.comp_index, networks)
        if child is not None:
            children.append(child)
    return children


def is_unit_slave_connected(unit_id: str, networks: Iterable[NetworkGroup]) -> bool:
    """True when the unit is a slave member of any master network."""

    member = SlaveMember(UnitID(unit_id))
    return any(
        isinstance(network, MasterNetwork) and member in network.members for network in networks
    )


def is_unit_master_connected(unit_id: str, networks: Iterable[NetworkGroup]) -> bool:
    """True when the unit operates a master network with at least one member."""

    return any(
        isinstance(network, MasterNetwork) and network.master_id == unit_id and network.members
        for network in networks
    )


def is_unit_connected(unit_id: str, networks: Sequence[NetworkGroup]) -> bool:
    if is_unit_slave_connected(unit_id, networks) or is_unit_master_connected(unit_id, networks):
        return True
    for network in networks:
        if isinstance(network, PeerNetwork) and unit_id in network.peer_ids:
            return True
        if isinstance(network, MasterNetwork) and any(
            member.unit_id == unit_id for member in network.members
        ):
            return True
    return False


def network_units(network: NetworkGroup) -> list[UnitID]:
    """Every unit id appearing in a single network record."""

    if isinstance(network, PeerNetwork):
        return list(network.peer_ids)
    ids = [network.master_id]
    for member in network.members:
        if member.unit_id not in ids:
            ids.append(member.unit_id)
    return ids


def linked_unit_ids(unit_id: str, networks: Iterable[NetworkGroup]) -> list[UnitID]:
    """Units sharing at least one network record with ``unit_id``."""

    linked: list[UnitID] = []
    for network in networks:
        ids = network_units(network)
        if unit_id not in ids:
            continue
        for other in ids:
            if other != unit_id and other not in linked:
                linked.append(other)
    return linked


# --- Pin state ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PinState:
    """Connection summary of a single pin for an editor."""

    connected: bool
    disabled: bool
    color: str | None


def pin_state(
    profile: UnitC3Profile,
    comp_index: int,
    networks: Sequence[NetworkGroup],
    pin_colors: Mapping[tuple[str, int], str] | None = None,
) -> PinState:
    component = profile.component(comp_index)
    if component is None:
        return PinState(connected=False, disabled=False, color=None)

    unit_id = profile.unit_id
    if component.role is Role.MASTER:
        network = find_master_network(unit_id, comp_index, networks)
        color = network.color if network is not None else None
        if color is None and pin_colors is not None:
            color = pin_colors.get((unit_id, comp_index))
        return PinState(
            connected=bool(network is not None and network.members),
            disabled=is_unit_slave_connected(unit_id, networks),
            color=color,
        )

    if component.role is Role.SLAVE:
        member = SlaveMember(unit_id)
        parent = find_parent_network(member, networks)
        return PinState(
            connected=parent is not None,
            disabled=is_unit_master_connected(unit_id, networks),
            color=parent.color if parent is not None else None,
        )

    peer_network = find_peer_network(unit_id, networks, component.network_class)
    return PinState(
        connected=bool(peer_network is not None and len(peer_network.peer_ids) >= 2),
        disabled=False,
        color=peer_network.color if peer_network is not None else None,
    )
