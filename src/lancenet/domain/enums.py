"""Enumerations and equipment flag constants for the C3 network domain."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Connection role of a single communications component."""

    MASTER = "master"
    SLAVE = "slave"
    PEER = "peer"


class NetworkClass(StrEnum):
    """Compatibility class of communications hardware.

    The string values double as the persisted ``type`` of a network group.
    """

    C3 = "c3"
    C3I = "c3i"
    NAVAL = "naval"
    NOVA = "nova"


# --- Equipment flags ------------------------------------------------------------

FLAG_C3_SLAVE = "F_C3S"
FLAG_C3_BOOSTED_SLAVE = "F_C3SBS"
FLAG_C3_EMERGENCY_MASTER = "F_C3EM"
FLAG_C3_MASTER = "F_C3M"
FLAG_C3_BOOSTED_MASTER = "F_C3MBS"
FLAG_C3I = "F_C3I"
FLAG_NOVA = "F_NOVA"
FLAG_NAVAL_C3 = "F_NAVAL_C3"

ALL_C3_FLAGS = frozenset(
    {
        FLAG_C3_SLAVE,
        FLAG_C3_BOOSTED_SLAVE,
        FLAG_C3_EMERGENCY_MASTER,
        FLAG_C3_MASTER,
        FLAG_C3_BOOSTED_MASTER,
        FLAG_C3I,
        FLAG_NOVA,
        FLAG_NAVAL_C3,
    }
)

MASTER_FLAGS = frozenset({FLAG_C3_MASTER, FLAG_C3_BOOSTED_MASTER})
SLAVE_FLAGS = frozenset({FLAG_C3_SLAVE, FLAG_C3_BOOSTED_SLAVE})
PEER_FLAGS = frozenset({FLAG_C3I, FLAG_NOVA, FLAG_NAVAL_C3})
BOOSTED_FLAGS = frozenset({FLAG_C3_BOOSTED_SLAVE, FLAG_C3_BOOSTED_MASTER})
