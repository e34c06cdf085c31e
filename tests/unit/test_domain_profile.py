"""Unit tests for communications profiles."""

from __future__ import annotations

from lancenet.domain import models as dm
from lancenet.domain.enums import NetworkClass, Role
from lancenet.domain.profile import (
    UnitC3Profile,
    are_classes_compatible,
    network_class_for,
    parse_as_specials,
)


def _unit(*equipment: dm.Equipment, specials: list[str] | None = None) -> dm.ForceUnit:
    return dm.ForceUnit(
        id=dm.UnitID("u1"),
        name="Atlas",
        bv=1900,
        equipment=list(equipment),
        specials=specials or [],
    )


def test_equivalent_names_share_a_class():
    names = ["C3 Master", "C3 Slave", "C3 Boosted Slave", "C3 Emergency Master", "BC3"]
    assert {network_class_for(name) for name in names} == {NetworkClass.C3}
    assert network_class_for("  c3i ") is NetworkClass.C3I
    assert network_class_for("Naval C3") is NetworkClass.NAVAL
    assert network_class_for("Nova CEWS") is NetworkClass.NOVA
    assert network_class_for("TAG") is None
    assert network_class_for(None) is None


def test_class_compatibility():
    assert are_classes_compatible(NetworkClass.C3, NetworkClass.C3)
    assert not are_classes_compatible(NetworkClass.C3, NetworkClass.C3I)
    assert not are_classes_compatible(None, None)


def test_profile_from_equipment_flags():
    unit = _unit(
        dm.Equipment("Medium Laser"),
        dm.Equipment("C3 Master", frozenset({"F_C3M"})),
        dm.Equipment("C3 Boosted Slave", frozenset({"F_C3SBS"})),
    )

    profile = UnitC3Profile.from_unit(unit)

    assert profile.has_c3
    assert [(c.index, c.role) for c in profile.components] == [
        (0, Role.MASTER),
        (1, Role.SLAVE),
    ]
    assert profile.components[1].boosted
    assert profile.master_components == (profile.components[0],)
    assert profile.component(5) is None
    assert profile.role_of(-1) is None


def test_peer_equipment_profile():
    profile = UnitC3Profile.from_unit(_unit(dm.Equipment("C3i", frozenset({"F_C3I"}))))

    assert profile.components[0].role is Role.PEER
    assert profile.components[0].network_class is NetworkClass.C3I


def test_alpha_strike_specials_expand_master_count():
    specials = ["ENE", "C3M2", "C3BSS", "NOVA"]

    parsed = parse_as_specials(specials)
    assert [(p.flag, p.count) for p in parsed] == [("F_C3M", 2), ("F_C3SBS", 1), ("F_NOVA", 1)]

    profile = UnitC3Profile.from_unit(_unit(specials=specials))
    assert [c.role for c in profile.components] == [
        Role.MASTER,
        Role.MASTER,
        Role.SLAVE,
        Role.PEER,
    ]
    assert [c.index for c in profile.components] == [0, 1, 2, 3]


def test_unit_without_c3_has_empty_profile():
    profile = UnitC3Profile.from_unit(_unit(dm.Equipment("AC/20")))
    assert not profile.has_c3
    assert profile.components == ()
