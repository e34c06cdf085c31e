"""Import and export helpers for shareable force files."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4
from zipfile import ZIP_DEFLATED, ZipFile

from pydantic import BaseModel, Field

from lancenet.domain import models as dm
from lancenet.domain.serialization import SerializedForce, force_to_record, record_to_force


class ForceMetadata(BaseModel):
    """High-level information about a packaged force."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str | None = None
    author: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    app_version: str = "0.1.0"


class ForceManifest(BaseModel):
    """Top-level manifest stored in a `.lancenet` archive."""

    format_version: int = 1
    metadata: ForceMetadata
    force: SerializedForce


MANIFEST_PATH = "lancenet/manifest.json"


def load_manifest(path: Path | str) -> ForceManifest:
    """Load a force manifest from a `.lancenet` archive."""

    zip_path = Path(path)
    with ZipFile(zip_path, "r") as archive:
        try:
            with archive.open(MANIFEST_PATH) as manifest_file:
                payload = json.load(manifest_file)
        except KeyError as exc:  # pragma: no cover - invalid archive
            raise FileNotFoundError("manifest.json not found in archive") from exc
    return ForceManifest.model_validate(payload)


def save_manifest(manifest: ForceManifest, path: Path | str) -> Path:
    """Write a manifest to a `.lancenet` archive."""

    payload = json.dumps(
        manifest.model_dump(mode="json", by_alias=True, exclude_none=True),
        indent=2,
        sort_keys=True,
    ).encode("utf-8")
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with ZipFile(target, "w", ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_PATH, payload)
    return target


def export_force(force: dm.Force, *, metadata: ForceMetadata | None = None) -> ForceManifest:
    """Produce a manifest from an in-memory force."""

    return ForceManifest(
        metadata=metadata or ForceMetadata(name=force.name),
        force=force_to_record(force),
    )


def import_force_from_manifest(
    manifest: ForceManifest, *, new_id: dm.ForceID | None = None
) -> dm.Force:
    """Return a force rebuilt from a manifest, optionally under a new id."""

    force = record_to_force(manifest.force)
    if new_id is not None:
        force.id = new_id
    return force
