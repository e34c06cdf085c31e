"""Unit tests for topology queries."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from lancenet.domain import models as dm
from lancenet.domain import query
from lancenet.domain.enums import NetworkClass, Role
from lancenet.domain.profile import UnitC3Profile


def _master(net_id: str, master: str, index: int, *members: dm.MemberRef) -> dm.MasterNetwork:
    return dm.MasterNetwork(
        id=dm.NetworkID(net_id),
        network_class=NetworkClass.C3,
        color="#1565C0",
        master_id=dm.UnitID(master),
        master_comp_index=index,
        members=list(members),
    )


def _peer(net_id: str, *peers: str) -> dm.PeerNetwork:
    return dm.PeerNetwork(
        id=dm.NetworkID(net_id),
        network_class=NetworkClass.C3I,
        color="#2E7D32",
        peer_ids=[dm.UnitID(p) for p in peers],
    )


def _hierarchy() -> list[dm.NetworkGroup]:
    return [
        _master("top", "A", 0, dm.SubMasterMember(dm.UnitID("B"), 0), dm.SlaveMember(dm.UnitID("S1"))),
        _master("sub", "B", 0, dm.SlaveMember(dm.UnitID("S2"))),
        _peer("mesh", "P1", "P2", "P3"),
    ]


def test_parse_member_variants():
    assert query.parse_member("unit-7") == dm.SlaveMember(dm.UnitID("unit-7"))
    assert query.parse_member("unit-7:1") == dm.SubMasterMember(dm.UnitID("unit-7"), 1)
    # Malformed suffixes fall back to a slave member.
    assert query.parse_member("unit-7:x") == dm.SlaveMember(dm.UnitID("unit-7:x"))
    assert query.parse_member(":3") == dm.SlaveMember(dm.UnitID(":3"))
    assert query.parse_member("unit-7:\u00b2") == dm.SlaveMember(dm.UnitID("unit-7:\u00b2"))
    assert query.parse_member("unit-7:\u0663") == dm.SlaveMember(dm.UnitID("unit-7:\u0663"))


def test_member_encoding_round_trip():
    members = ["alpha", query.create_master_member("bravo", 2), "charlie"]

    decoded = [query.parse_member(raw) for raw in members]

    assert [query.encode_member(member) for member in decoded] == members
    assert query.create_master_member("bravo", 2) == "bravo:2"


_unit_ids = st.text(min_size=1).filter(lambda value: ":" not in value)
_members = st.one_of(
    st.builds(dm.SlaveMember, _unit_ids),
    st.builds(dm.SubMasterMember, _unit_ids, st.integers(min_value=0, max_value=10_000)),
)


@given(st.lists(_members))
def test_member_list_round_trip_property(member_list):
    encoded = [query.encode_member(member) for member in member_list]
    assert [query.parse_member(raw) for raw in encoded] == member_list


@given(st.text())
def test_parse_member_never_raises(raw):
    member = query.parse_member(raw)
    if isinstance(member, dm.SlaveMember):
        assert member.unit_id == raw
    else:
        unit_id, _, suffix = raw.rpartition(":")
        assert (member.unit_id, member.comp_index) == (unit_id, int(suffix))


def test_exact_match_lookups():
    networks = _hierarchy()

    assert query.find_master_network("B", 0, networks).id == "sub"
    assert query.find_master_network("B", 1, networks) is None
    assert query.find_peer_network("P2", networks).id == "mesh"
    assert query.find_peer_network("P2", networks, NetworkClass.NOVA) is None
    assert query.find_network("top", networks).id == "top"
    assert query.find_network("missing", networks) is None


def test_top_level_and_sub_networks():
    networks = _hierarchy()

    top = query.get_top_level_networks(networks)
    assert [n.id for n in top] == ["top", "mesh"]

    children = query.find_sub_networks(networks[0], networks)
    assert [n.id for n in children] == ["sub"]
    assert query.find_sub_networks(networks[2], networks) == []


def test_connection_combinators():
    networks = _hierarchy()

    assert query.is_unit_slave_connected("S1", networks)
    assert not query.is_unit_slave_connected("B", networks)
    assert query.is_unit_master_connected("A", networks)
    assert query.is_unit_master_connected("B", networks)
    assert query.is_unit_connected("P3", networks)
    assert query.is_unit_connected("B", networks)
    assert not query.is_unit_connected("Z", networks)


def test_empty_master_network_is_not_master_connected():
    networks: list[dm.NetworkGroup] = [_master("empty", "A", 0)]
    assert not query.is_unit_master_connected("A", networks)


def test_linked_units():
    networks = _hierarchy()

    assert query.linked_unit_ids("B", networks) == ["A", "S1", "S2"]
    assert query.linked_unit_ids("P1", networks) == ["P2", "P3"]
    assert query.network_units(networks[1]) == ["B", "S2"]


def test_pin_state_for_master_and_slave_pins():
    networks = _hierarchy()
    master_profile = UnitC3Profile(
        unit_id=dm.UnitID("A"),
        components=(dm.Component(0, Role.MASTER, NetworkClass.C3),),
    )
    slave_profile = UnitC3Profile(
        unit_id=dm.UnitID("S1"),
        components=(dm.Component(0, Role.SLAVE, NetworkClass.C3),),
    )

    master_state = query.pin_state(master_profile, 0, networks)
    assert master_state.connected and not master_state.disabled
    assert master_state.color == "#1565C0"

    slave_state = query.pin_state(slave_profile, 0, networks)
    assert slave_state.connected and slave_state.color == "#1565C0"
    assert query.pin_state(slave_profile, 4, networks).color is None


def test_pin_state_uses_preassigned_color_when_unlinked():
    profile = UnitC3Profile(
        unit_id=dm.UnitID("X"),
        components=(dm.Component(0, Role.MASTER, NetworkClass.C3),),
    )
    state = query.pin_state(profile, 0, [], {(dm.UnitID("X"), 0): "#7B1FA2"})
    assert not state.connected
    assert state.color == "#7B1FA2"
