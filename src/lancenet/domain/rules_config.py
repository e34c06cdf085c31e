"""Declarative rule configuration for the C3 network domain."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import NetworkClass

NETWORK_COLORS: tuple[str, ...] = (
    "#1565C0",
    "#2E7D32",
    "#7B1FA2",
    "#E65100",
    "#00838F",
    "#5D4037",
    "#283593",
    "#558B2F",
    "#00695C",
    "#6A1B9A",
    "#EF6C00",
    "#0277BD",
    "#4E342E",
    "#1B5E20",
    "#4527A0",
    "#006064",
    "#33691E",
    "#311B92",
    "#00796B",
    "#5E35B1",
    "#F57C00",
    "#0288D1",
    "#8E24AA",
    "#3E2723",
    "#827717",
    "#01579B",
)


def _default_limits() -> dict[NetworkClass, int]:
    # C3: members directly under one master pin; peers: whole mesh size.
    return {
        NetworkClass.C3: 3,
        NetworkClass.C3I: 6,
        NetworkClass.NAVAL: 6,
        NetworkClass.NOVA: 3,
    }


@dataclass(frozen=True, slots=True)
class C3Rules:
    """Topology and battle-value constants for communications networks."""

    tax_rate: float = 0.05
    boosted_tax_rate: float = 0.07
    min_linked_units: int = 2
    min_peers: int = 2
    network_limits: dict[NetworkClass, int] = field(default_factory=_default_limits)
    enforce_network_limits: bool = False
    detect_hierarchy_cycles: bool = True
    colors: tuple[str, ...] = NETWORK_COLORS


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container."""

    c3: C3Rules = field(default_factory=C3Rules)


DEFAULT_RULES = RulesConfig()
