"""Battle-value surcharge for units sharing a communications network."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .models import ForceUnit, NetworkGroup
from .profile import UnitC3Profile, are_classes_compatible, network_class_for
from .query import network_units
from .rules_config import DEFAULT_RULES, RulesConfig


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_tax(
    unit: ForceUnit,
    all_units: Sequence[ForceUnit],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Return the network surcharge carried by ``unit``.

    Every linked unit in the force whose static communications type is
    compatible with the unit's own counts towards the network total, whether
    or not it is reachable in the topology graph.
    """

    if not unit.linked:
        return 0
    network_class = network_class_for(unit.c3_type)
    networked = [
        other
        for other in all_units
        if other.linked and are_classes_compatible(network_class_for(other.c3_type), network_class)
    ]
    if len(networked) < rules.c3.min_linked_units:
        return 0
    return round_half_up(sum(other.bv for other in networked) * rules.c3.tax_rate)


def unit_total_bv(
    unit: ForceUnit,
    all_units: Sequence[ForceUnit],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    return unit.bv + calculate_tax(unit, all_units, rules=rules)


def calculate_force_tax(
    units: Sequence[ForceUnit],
    networks: Sequence[NetworkGroup],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Surcharge for the whole force, charged once per network record.

    A network with fewer than two known units costs nothing.  The boosted
    rate applies when any unit in the network carries boosted hardware.
    """

    by_id = {unit.id: unit for unit in units}
    total = 0
    for network in networks:
        members = [by_id[unit_id] for unit_id in network_units(network) if unit_id in by_id]
        if len(members) < rules.c3.min_linked_units:
            continue
        boosted = any(
            component.boosted
            for unit in members
            for component in UnitC3Profile.from_unit(unit).components
        )
        rate = rules.c3.boosted_tax_rate if boosted else rules.c3.tax_rate
        total += round_half_up(sum(unit.bv for unit in members) * rate)
    return total


def force_total_bv(
    units: Sequence[ForceUnit],
    networks: Sequence[NetworkGroup],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Base battle value of every unit plus the force's network surcharge."""

    return sum(unit.bv for unit in units) + calculate_force_tax(units, networks, rules=rules)
