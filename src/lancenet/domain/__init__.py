"""Domain model for C3 communications networks.

This package hosts the rules that govern how communications components on
different units are linked.  It exposes:

* Dataclasses describing forces, units and network groups (see :mod:`models`).
* Enumerations for component roles and network classes.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions: unit profiles, connection validation, topology
  queries, incremental mutation, and the battle-value tax.

Everything operates in-memory; persistence goes through
:mod:`serialization` and a thin repository adapter.
"""

from . import (
    enums,
    models,
    mutation,
    profile,
    query,
    rules_config,
    serialization,
    tax,
    validation,
)

__all__ = [
    "enums",
    "models",
    "mutation",
    "profile",
    "query",
    "rules_config",
    "serialization",
    "tax",
    "validation",
]
