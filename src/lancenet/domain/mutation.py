"""Incremental edits of a force's network topology.

:class:`TopologyMutator` is the only place network records are created,
merged, split or deleted.  Every entry point either leaves the topology in a
consistent state or does nothing; rejected connections are reported through
:class:`~lancenet.domain.validation.ConnectionCheck` rather than raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import uuid4

from .enums import NetworkClass, Role
from .models import (
    Force,
    MasterNetwork,
    MemberRef,
    NetworkGroup,
    NetworkID,
    PeerNetwork,
    SlaveMember,
    SubMasterMember,
    UnitID,
)
from .profile import UnitC3Profile
from .query import find_master_network, find_network, find_peer_network, parse_member
from .rules_config import DEFAULT_RULES, RulesConfig
from .validation import ConnectionCheck, can_connect

logger = logging.getLogger(__name__)


def new_network_id() -> NetworkID:
    return NetworkID(f"net_{uuid4().hex[:12]}")


class TopologyMutator:
    """Apply connection edits to a force and signal when its topology changes."""

    def __init__(
        self,
        force: Force,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        id_factory: Callable[[], NetworkID] = new_network_id,
    ) -> None:
        self.force = force
        self.rules = rules
        self._id_factory = id_factory
        self._profiles: dict[UnitID, UnitC3Profile] = {}
        self._next_color = 0
        self.pin_colors: dict[tuple[UnitID, int], str] = {}
        self._assign_pin_colors()

    @property
    def networks(self) -> list[NetworkGroup]:
        return self.force.networks

    # --- profiles ---------------------------------------------------------------

    def profile(self, unit_id: str) -> UnitC3Profile | None:
        cached = self._profiles.get(UnitID(unit_id))
        if cached is not None:
            return cached
        unit = self.force.unit(unit_id)
        if unit is None:
            return None
        profile = UnitC3Profile.from_unit(unit)
        self._profiles[profile.unit_id] = profile
        return profile

    def profiles(self) -> list[UnitC3Profile]:
        """Profiles of every unit in the force carrying C3 equipment."""

        result = []
        for unit in self.force.units:
            profile = self.profile(unit.id)
            if profile is not None and profile.has_c3:
                result.append(profile)
        return result

    # --- colors -----------------------------------------------------------------

    def _assign_pin_colors(self) -> None:
        for network in self.networks:
            if isinstance(network, MasterNetwork):
                key = (network.master_id, network.master_comp_index)
                self.pin_colors[key] = network.color
        self._next_color = len(self.networks)
        for profile in self.profiles():
            for component in profile.master_components:
                key = (profile.unit_id, component.index)
                if key not in self.pin_colors:
                    self.pin_colors[key] = self._take_color()

    def _take_color(self) -> str:
        palette = self.rules.c3.colors
        color = palette[self._next_color % len(palette)]
        self._next_color += 1
        return color

    # --- connections ------------------------------------------------------------

    def check(
        self, source_id: str, source_index: int, target_id: str, target_index: int
    ) -> ConnectionCheck:
        return can_connect(
            self.profile(source_id),
            source_index,
            self.profile(target_id),
            target_index,
            self.networks,
            rules=self.rules,
        )

    def connect(
        self, source_id: str, source_index: int, target_id: str, target_index: int
    ) -> ConnectionCheck:
        """Link the source pin to the target pin, dispatching on their roles."""

        result = self.check(source_id, source_index, target_id, target_index)
        if not result.valid:
            logger.debug(
                "rejected %s:%d -> %s:%d: %s",
                source_id,
                source_index,
                target_id,
                target_index,
                result.reason,
            )
            return result

        source = self.profile(source_id)
        target = self.profile(target_id)
        if source is None or target is None:  # pragma: no cover - checked above
            return result
        source_comp = source.components[source_index]
        target_comp = target.components[target_index]
        network_class = source_comp.network_class
        roles = (source_comp.role, target_comp.role)

        if roles == (Role.PEER, Role.PEER):
            changed = self._link_peers(source.unit_id, target.unit_id, network_class)
        elif roles == (Role.MASTER, Role.SLAVE):
            changed = self._add_member(
                source.unit_id, source_index, network_class, SlaveMember(target.unit_id)
            )
        elif roles == (Role.SLAVE, Role.MASTER):
            changed = self._add_member(
                target.unit_id, target_index, network_class, SlaveMember(source.unit_id)
            )
        else:
            changed = self._detach_child(
                target.unit_id, target_index, SubMasterMember(source.unit_id, source_index)
            )
            changed = (
                self._add_member(
                    source.unit_id,
                    source_index,
                    network_class,
                    SubMasterMember(target.unit_id, target_index),
                )
                or changed
            )

        if changed:
            logger.debug(
                "connected %s:%d -> %s:%d", source_id, source_index, target_id, target_index
            )
            self.force.mark_topology_changed()
        return result

    def _link_peers(self, first: UnitID, second: UnitID, network_class: NetworkClass) -> bool:
        first_net = find_peer_network(first, self.networks, network_class)
        second_net = find_peer_network(second, self.networks, network_class)

        if first_net is not None and second_net is not None:
            if first_net is second_net:
                return False
            for peer_id in second_net.peer_ids:
                if peer_id not in first_net.peer_ids:
                    first_net.peer_ids.append(peer_id)
            self.networks.remove(second_net)
            logger.debug("merged peer network %s into %s", second_net.id, first_net.id)
            return True
        if first_net is not None:
            first_net.peer_ids.append(second)
            return True
        if second_net is not None:
            second_net.peer_ids.append(first)
            return True

        self.networks.append(
            PeerNetwork(
                id=self._id_factory(),
                network_class=network_class,
                color=self._take_color(),
                peer_ids=[first, second],
            )
        )
        return True

    def _add_member(
        self,
        master_id: UnitID,
        master_index: int,
        network_class: NetworkClass,
        member: MemberRef,
    ) -> bool:
        changed = False
        network = find_master_network(master_id, master_index, self.networks)
        if network is None:
            key = (master_id, master_index)
            color = self.pin_colors.get(key) or self._take_color()
            self.pin_colors[key] = color
            network = MasterNetwork(
                id=self._id_factory(),
                network_class=network_class,
                color=color,
                master_id=master_id,
                master_comp_index=master_index,
            )
            self.networks.append(network)
            changed = True

        # A unit is a member of at most one master network.
        for other in list(self.networks):
            if not isinstance(other, MasterNetwork):
                continue
            kept = [
                existing
                for existing in other.members
                if existing.unit_id != member.unit_id or (other is network and existing == member)
            ]
            if len(kept) == len(other.members):
                continue
            other.members = kept
            changed = True
            if not kept and other is not network:
                self.networks.remove(other)

        if member not in network.members:
            network.members.append(member)
            changed = True
        return changed

    def _detach_child(self, parent_id: UnitID, parent_index: int, child: MemberRef) -> bool:
        """Drop ``child`` from the parent pin's network if it is listed there."""

        network = find_master_network(parent_id, parent_index, self.networks)
        if network is None or child not in network.members:
            return False
        network.members.remove(child)
        if not network.members:
            self.networks.remove(network)
        logger.debug("removed reverse edge %s -> %s", network.id, child)
        return True

    # --- removals ---------------------------------------------------------------

    def remove_member(self, network_id: str, member: MemberRef | str) -> bool:
        """Strip a member; the network disappears once it has no members."""

        if isinstance(member, str):
            member = parse_member(member)
        network = find_network(network_id, self.networks)
        if not isinstance(network, MasterNetwork) or member not in network.members:
            return False
        network.members.remove(member)
        if not network.members:
            self.networks.remove(network)
        self.force.mark_topology_changed()
        return True

    def remove_unit_from_network(
        self,
        network: NetworkGroup | str,
        unit_id: str,
        member: MemberRef | str | None = None,
    ) -> bool:
        network_id = network if isinstance(network, str) else network.id
        current = find_network(network_id, self.networks)
        if current is None:
            return False

        if isinstance(current, PeerNetwork):
            if unit_id not in current.peer_ids:
                return False
            current.peer_ids.remove(UnitID(unit_id))
            if len(current.peer_ids) < self.rules.c3.min_peers:
                self.networks.remove(current)
            self.force.mark_topology_changed()
            return True

        if member is None:
            member = next((m for m in current.members if m.unit_id == unit_id), None)
            if member is None:
                return False
        return self.remove_member(current.id, member)

    def remove_network(self, network_id: str) -> bool:
        network = find_network(network_id, self.networks)
        if network is None:
            return False
        self.networks.remove(network)
        self.force.mark_topology_changed()
        return True

    def clear_all(self) -> bool:
        if not self.networks:
            return False
        self.networks.clear()
        self.force.mark_topology_changed()
        return True
