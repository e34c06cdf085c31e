"""Runtime primitives backing the lancenet HTTP API."""

from __future__ import annotations

import logging
from pathlib import Path

from lancenet import savegame
from lancenet.config import Settings, get_settings
from lancenet.domain import models as dm
from lancenet.domain.models import MasterNetwork, PeerNetwork
from lancenet.domain.mutation import TopologyMutator
from lancenet.domain.query import (
    encode_member,
    find_sub_networks,
    get_top_level_networks,
    pin_state,
)
from lancenet.domain.rules_config import RulesConfig
from lancenet.domain.serialization import (
    SerializedUnit,
    dump_networks,
    record_to_unit,
    unit_to_record,
)
from lancenet.domain.tax import calculate_force_tax, calculate_tax, force_total_bv
from lancenet.domain.validation import ConnectionCheck, valid_target_pins
from lancenet.repository import JsonForceRepository

logger = logging.getLogger(__name__)


class ForceService:
    """Utilities for loading forces and editing their network topology."""

    def __init__(self, repository: JsonForceRepository, *, rules: RulesConfig) -> None:
        self._repository = repository
        self._rules = rules

    def list_forces(self) -> list[dm.Force]:
        """Return every persisted force ordered by identifier."""

        forces: list[dm.Force] = []
        for force_id in self._repository.list_forces():
            try:
                forces.append(self._repository.load(force_id))
            except FileNotFoundError:
                continue
            except ValueError as exc:
                logger.warning("skipping unreadable force %s: %s", int(force_id), exc)
        return forces

    def get_force(self, force_id: dm.ForceID) -> dm.Force:
        """Load a single force or raise ``FileNotFoundError``."""

        return self._repository.load(force_id)

    def save_force(self, force: dm.Force) -> dm.Force:
        self._repository.save(force)
        return force

    def create_force(self, name: str) -> dm.Force:
        force = dm.Force(id=self._next_identifier(), name=name)
        self._repository.save(force)
        return force

    def _next_identifier(self) -> dm.ForceID:
        existing = self._repository.list_forces()
        if not existing:
            return dm.ForceID(1)
        return dm.ForceID(int(max(existing, key=int)) + 1)

    def add_unit(self, force_id: dm.ForceID, record: SerializedUnit) -> dm.ForceUnit:
        force = self.get_force(force_id)
        if force.unit(record.id) is not None:
            raise ValueError(f"Unit {record.id} already in force")
        unit = record_to_unit(record)
        force.units.append(unit)
        self.save_force(force)
        return unit

    def _mutator(self, force: dm.Force) -> TopologyMutator:
        return TopologyMutator(force, rules=self._rules)

    def connect(
        self,
        force_id: dm.ForceID,
        source_id: str,
        source_index: int,
        target_id: str,
        target_index: int,
    ) -> tuple[ConnectionCheck, dm.Force]:
        force = self.get_force(force_id)
        result = self._mutator(force).connect(source_id, source_index, target_id, target_index)
        if force.modified:
            self.save_force(force)
        elif not result.valid:
            logger.info("force %s: connection rejected (%s)", int(force_id), result.reason)
        return result, force

    def valid_targets(
        self, force_id: dm.ForceID, unit_id: str, comp_index: int
    ) -> dict[str, list[int]]:
        force = self.get_force(force_id)
        mutator = self._mutator(force)
        source = mutator.profile(unit_id)
        if source is None:
            raise ValueError(f"Unit {unit_id} not found")
        targets = valid_target_pins(
            source, comp_index, mutator.profiles(), force.networks, rules=self._rules
        )
        return {str(unit): pins for unit, pins in targets.items()}

    def remove_network(self, force_id: dm.ForceID, network_id: str) -> dm.Force:
        force = self.get_force(force_id)
        if self._mutator(force).remove_network(network_id):
            self.save_force(force)
        return force

    def remove_unit_from_network(
        self,
        force_id: dm.ForceID,
        network_id: str,
        unit_id: str,
        member: str | None = None,
    ) -> dm.Force:
        force = self.get_force(force_id)
        if self._mutator(force).remove_unit_from_network(network_id, unit_id, member):
            self.save_force(force)
        return force

    def clear_networks(self, force_id: dm.ForceID) -> dm.Force:
        force = self.get_force(force_id)
        if self._mutator(force).clear_all():
            self.save_force(force)
        return force

    def import_from_file(self, manifest_path: Path | str) -> dm.Force:
        """Load a `.lancenet` archive and persist the contained force under a new id."""

        manifest = savegame.load_manifest(manifest_path)
        force = savegame.import_force_from_manifest(manifest, new_id=self._next_identifier())
        return self.save_force(force)

    def export_to_file(self, force_id: dm.ForceID, path: Path | str) -> Path:
        force = self.get_force(force_id)
        return savegame.save_manifest(savegame.export_force(force), path)

    # --- views ------------------------------------------------------------------

    @staticmethod
    def to_summary_dict(force: dm.Force) -> dict[str, object]:
        return {
            "id": int(force.id),
            "name": force.name,
            "unit_count": len(force.units),
            "network_count": len(force.networks),
        }

    def to_detail_dict(self, force: dm.Force) -> dict[str, object]:
        summary = self.to_summary_dict(force)
        summary["units"] = [
            unit_to_record(unit).model_dump(mode="json", by_alias=True, exclude_none=True)
            for unit in force.units
        ]
        summary["c3Networks"] = dump_networks(force.networks)
        return summary

    def to_topology_dict(self, force: dm.Force) -> dict[str, object]:
        """Networks plus the hierarchy and pin views an editor renders."""

        mutator = self._mutator(force)
        pins: dict[str, dict[str, object]] = {}
        for profile in mutator.profiles():
            for component in profile.components:
                state = pin_state(profile, component.index, force.networks, mutator.pin_colors)
                pins[f"{profile.unit_id}:{component.index}"] = {
                    "role": str(component.role),
                    "type": str(component.network_class),
                    "connected": state.connected,
                    "disabled": state.disabled,
                    "color": state.color,
                }
        return {
            "networks": dump_networks(force.networks),
            "top_level": [network.id for network in get_top_level_networks(force.networks)],
            "sub_networks": {
                network.id: [child.id for child in find_sub_networks(network, force.networks)]
                for network in force.networks
                if isinstance(network, MasterNetwork)
            },
            "labels": {network.id: self._label(force, network) for network in force.networks},
            "pins": pins,
        }

    @staticmethod
    def _label(force: dm.Force, network: dm.NetworkGroup) -> str:
        if isinstance(network, PeerNetwork):
            return f"{network.network_class.upper()} ({len(network.peer_ids)} peers)"
        master = force.unit(network.master_id)
        count = len(network.members)
        noun = "member" if count == 1 else "members"
        members = ", ".join(encode_member(m) for m in network.members)
        return f"{master.name if master else 'Unknown'} ({count} {noun}: {members})"

    def tax_report(self, force: dm.Force) -> dict[str, object]:
        units = force.units
        return {
            "units": {
                str(unit.id): {"bv": unit.bv, "tax": calculate_tax(unit, units, rules=self._rules)}
                for unit in units
            },
            "c3_tax": calculate_force_tax(units, force.networks, rules=self._rules),
            "total_bv": force_total_bv(units, force.networks, rules=self._rules),
        }


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.rules = self.settings.rules()
        self.repository = JsonForceRepository(self.settings.data_dir)
        self.forces = ForceService(self.repository, rules=self.rules)

    async def shutdown(self) -> None:
        logger.debug("api state shut down")


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
