"""HTTP routes for the lancenet API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from lancenet.api.runtime import ApiState
from lancenet.domain import models as dm
from lancenet.domain.serialization import SerializedUnit, dump_networks

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class ForceSummary(BaseModel):
    id: int
    name: str
    unit_count: int
    network_count: int


class ForceDetail(ForceSummary):
    units: list[dict[str, object]]
    c3Networks: list[dict[str, object]]


class CreateForceRequest(BaseModel):
    name: str = Field(min_length=1)


class ConnectRequest(BaseModel):
    source_id: str = Field(min_length=1)
    source_index: int = Field(ge=0)
    target_id: str = Field(min_length=1)
    target_index: int = Field(ge=0)


class ConnectResponse(BaseModel):
    valid: bool
    reason: str | None
    networks: list[dict[str, object]]


class RemoveUnitRequest(BaseModel):
    unit_id: str = Field(min_length=1)
    member: str | None = None


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="force not found")


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "enforce_network_limits": state.rules.c3.enforce_network_limits,
        "detect_hierarchy_cycles": state.rules.c3.detect_hierarchy_cycles,
    }


@router.get("/forces", response_model=list[ForceSummary])
async def list_forces(state: ApiStateDep) -> list[ForceSummary]:
    forces = state.forces.list_forces()
    return [ForceSummary.model_validate(state.forces.to_summary_dict(f)) for f in forces]


@router.post("/forces", response_model=ForceDetail, status_code=status.HTTP_201_CREATED)
async def create_force(request: CreateForceRequest, state: ApiStateDep) -> ForceDetail:
    force = state.forces.create_force(request.name)
    return ForceDetail.model_validate(state.forces.to_detail_dict(force))


@router.get("/forces/{force_id}", response_model=ForceDetail)
async def get_force(force_id: int, state: ApiStateDep) -> ForceDetail:
    try:
        force = state.forces.get_force(dm.ForceID(force_id))
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return ForceDetail.model_validate(state.forces.to_detail_dict(force))


@router.post(
    "/forces/{force_id}/units",
    response_model=ForceDetail,
    status_code=status.HTTP_201_CREATED,
)
async def add_unit(force_id: int, unit: SerializedUnit, state: ApiStateDep) -> ForceDetail:
    force_key = dm.ForceID(force_id)
    try:
        state.forces.add_unit(force_key, unit)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise _not_found() from exc
    force = state.forces.get_force(force_key)
    return ForceDetail.model_validate(state.forces.to_detail_dict(force))


@router.get("/forces/{force_id}/networks")
async def get_networks(force_id: int, state: ApiStateDep) -> dict[str, object]:
    try:
        force = state.forces.get_force(dm.ForceID(force_id))
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return state.forces.to_topology_dict(force)


@router.post("/forces/{force_id}/networks/connect", response_model=ConnectResponse)
async def connect(force_id: int, request: ConnectRequest, state: ApiStateDep) -> ConnectResponse:
    try:
        result, force = state.forces.connect(
            dm.ForceID(force_id),
            request.source_id,
            request.source_index,
            request.target_id,
            request.target_index,
        )
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return ConnectResponse(
        valid=result.valid, reason=result.reason, networks=dump_networks(force.networks)
    )


@router.get("/forces/{force_id}/units/{unit_id}/pins/{comp_index}/targets")
async def get_valid_targets(
    force_id: int, unit_id: str, comp_index: int, state: ApiStateDep
) -> dict[str, list[int]]:
    try:
        return state.forces.valid_targets(dm.ForceID(force_id), unit_id, comp_index)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise _not_found() from exc


@router.delete("/forces/{force_id}/networks/{network_id}", response_model=ConnectResponse)
async def remove_network(force_id: int, network_id: str, state: ApiStateDep) -> ConnectResponse:
    try:
        force = state.forces.remove_network(dm.ForceID(force_id), network_id)
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return ConnectResponse(valid=True, reason=None, networks=dump_networks(force.networks))


@router.post(
    "/forces/{force_id}/networks/{network_id}/remove-unit", response_model=ConnectResponse
)
async def remove_unit_from_network(
    force_id: int, network_id: str, request: RemoveUnitRequest, state: ApiStateDep
) -> ConnectResponse:
    try:
        force = state.forces.remove_unit_from_network(
            dm.ForceID(force_id), network_id, request.unit_id, request.member
        )
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return ConnectResponse(valid=True, reason=None, networks=dump_networks(force.networks))


@router.delete("/forces/{force_id}/networks", response_model=ConnectResponse)
async def clear_networks(force_id: int, state: ApiStateDep) -> ConnectResponse:
    try:
        force = state.forces.clear_networks(dm.ForceID(force_id))
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return ConnectResponse(valid=True, reason=None, networks=[])


@router.get("/forces/{force_id}/tax")
async def get_tax(force_id: int, state: ApiStateDep) -> dict[str, object]:
    try:
        force = state.forces.get_force(dm.ForceID(force_id))
    except FileNotFoundError as exc:
        raise _not_found() from exc
    return state.forces.tax_report(force)
