"""JSON-based repository for forces."""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter

from lancenet.domain import models as dm
from lancenet.domain.serialization import SerializedForce, force_to_record, record_to_force


class JsonForceRepository:
    """Persist forces as JSON snapshots on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[SerializedForce] = TypeAdapter(SerializedForce)

    def _path_for(self, force_id: dm.ForceID) -> Path:
        return self.base_path / f"force_{int(force_id)}.json"

    def save(self, force: dm.Force) -> Path:
        """Serialize a force to disk and return the snapshot path."""

        path = self._path_for(force.id)
        payload = self._adapter.dump_json(
            force_to_record(force), indent=2, by_alias=True, exclude_none=True
        )
        path.write_bytes(payload)
        force.modified = False
        return path

    def load(self, force_id: dm.ForceID) -> dm.Force:
        """Load a previously saved force snapshot."""

        path = self._path_for(force_id)
        data = path.read_bytes()
        return record_to_force(self._adapter.validate_json(data))

    def list_forces(self) -> list[dm.ForceID]:
        """Return all force ids currently persisted in the repository."""

        ids: list[dm.ForceID] = []
        prefix = "force_"
        suffix = ".json"
        for path in self.base_path.glob("force_*.json"):
            stem = path.name
            if stem.startswith(prefix) and stem.endswith(suffix):
                raw = stem[len(prefix) : -len(suffix)]
                try:
                    ids.append(dm.ForceID(int(raw)))
                except ValueError:  # pragma: no cover - ignored malformed file
                    continue
        return sorted(ids, key=int)

    def delete(self, force_id: dm.ForceID) -> None:
        """Remove a force snapshot if it exists."""

        path = self._path_for(force_id)
        if path.exists():
            path.unlink()
