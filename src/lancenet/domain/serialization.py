"""Persisted JSON shape of forces and their network groups.

Network groups are stored with camelCase keys; members of a master network
are plain strings (``"unit"`` for a slave, ``"unit:2"`` for a sub-master).
Loading is forgiving: malformed entries are dropped rather than rejected.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import NetworkClass
from .models import (
    Equipment,
    Force,
    ForceID,
    ForceUnit,
    MasterNetwork,
    NetworkGroup,
    NetworkID,
    PeerNetwork,
    UnitID,
)
from .query import encode_member, parse_member

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> list[str] | None:
    if not value or not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


class SerializedNetworkGroup(BaseModel):
    """One peer mesh or one master pin's member list."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: NetworkClass
    color: str
    peer_ids: list[str] | None = Field(default=None, alias="peerIds")
    master_id: str | None = Field(default=None, alias="masterId")
    master_comp_index: int | None = Field(default=None, alias="masterCompIndex")
    members: list[str] | None = None

    @field_validator("peer_ids", "members", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> list[str] | None:
        return _string_list(value)


class SerializedEquipment(BaseModel):
    name: str
    flags: list[str] = Field(default_factory=list)


class SerializedUnit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1, pattern=r"^[^:]+$")
    name: str
    bv: int = Field(ge=0)
    c3_type: str | None = Field(default=None, alias="c3Type")
    linked: bool = False
    equipment: list[SerializedEquipment] = Field(default_factory=list)
    specials: list[str] = Field(default_factory=list)


class SerializedForce(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    units: list[SerializedUnit] = Field(default_factory=list)
    c3_networks: list[SerializedNetworkGroup] = Field(default_factory=list, alias="c3Networks")


# --- network groups -------------------------------------------------------------


def group_to_record(group: NetworkGroup) -> SerializedNetworkGroup:
    if isinstance(group, PeerNetwork):
        return SerializedNetworkGroup(
            id=group.id,
            type=group.network_class,
            color=group.color,
            peer_ids=list(group.peer_ids),
        )
    return SerializedNetworkGroup(
        id=group.id,
        type=group.network_class,
        color=group.color,
        master_id=group.master_id,
        master_comp_index=group.master_comp_index,
        members=[encode_member(member) for member in group.members],
    )


def record_to_group(record: SerializedNetworkGroup) -> NetworkGroup | None:
    """Convert a persisted record, or return ``None`` when it is unusable."""

    if record.peer_ids is not None:
        peers: list[UnitID] = []
        for peer_id in record.peer_ids:
            if peer_id not in peers:
                peers.append(UnitID(peer_id))
        if len(peers) < 2:
            return None
        return PeerNetwork(
            id=NetworkID(record.id),
            network_class=record.type,
            color=record.color,
            peer_ids=peers,
        )

    if record.master_id is None or not record.members:
        return None
    members = []
    for raw in record.members:
        member = parse_member(raw)
        if member not in members:
            members.append(member)
    return MasterNetwork(
        id=NetworkID(record.id),
        network_class=record.type,
        color=record.color,
        master_id=UnitID(record.master_id),
        master_comp_index=record.master_comp_index or 0,
        members=members,
    )


def networks_from_records(records: list[SerializedNetworkGroup]) -> list[NetworkGroup]:
    """Rebuild a topology, dropping records that break its invariants."""

    networks: list[NetworkGroup] = []
    pins: set[tuple[str, int]] = set()
    for record in records:
        group = record_to_group(record)
        if group is None:
            logger.warning("dropping malformed network record %s", record.id)
            continue
        if isinstance(group, MasterNetwork):
            pin = (group.master_id, group.master_comp_index)
            if pin in pins:
                logger.warning("dropping duplicate master network %s for %s:%d", group.id, *pin)
                continue
            pins.add(pin)
        networks.append(group)
    return networks


def dump_networks(networks: list[NetworkGroup]) -> list[dict[str, Any]]:
    """JSON-compatible list of network groups."""

    return [
        group_to_record(group).model_dump(mode="json", by_alias=True, exclude_none=True)
        for group in networks
    ]


def load_networks(payload: list[Any]) -> list[NetworkGroup]:
    records = []
    for raw in payload:
        try:
            records.append(SerializedNetworkGroup.model_validate(raw))
        except ValueError:
            logger.warning("skipping unreadable network record: %r", raw)
    return networks_from_records(records)


# --- forces ---------------------------------------------------------------------


def unit_to_record(unit: ForceUnit) -> SerializedUnit:
    return SerializedUnit(
        id=unit.id,
        name=unit.name,
        bv=unit.bv,
        c3_type=unit.c3_type,
        linked=unit.linked,
        equipment=[
            SerializedEquipment(name=item.name, flags=sorted(item.flags)) for item in unit.equipment
        ],
        specials=list(unit.specials),
    )


def record_to_unit(record: SerializedUnit) -> ForceUnit:
    return ForceUnit(
        id=UnitID(record.id),
        name=record.name,
        bv=record.bv,
        c3_type=record.c3_type,
        linked=record.linked,
        equipment=[Equipment(item.name, frozenset(item.flags)) for item in record.equipment],
        specials=list(record.specials),
    )


def force_to_record(force: Force) -> SerializedForce:
    return SerializedForce(
        id=int(force.id),
        name=force.name,
        units=[unit_to_record(unit) for unit in force.units],
        c3_networks=[group_to_record(group) for group in force.networks],
    )


def record_to_force(record: SerializedForce) -> Force:
    return Force(
        id=ForceID(record.id),
        name=record.name,
        units=[record_to_unit(unit) for unit in record.units],
        networks=networks_from_records(record.c3_networks),
    )
