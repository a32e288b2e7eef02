"""
Router: /entities

Read access to the entity catalog, an explicit reload and character authoring.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from adapters.entity_catalog import CatalogReloadError, EntityCatalog
from api.dependencies import get_catalog
from api.schemas import CreateEntityRequest, EntityContentResponse, EntityListResponse
from contracts import Entity, ReloadReport
from ports.entity_store import RecordValidationError, RecordWriteError

router = APIRouter(prefix="/entities", tags=["entities"])


def _require(catalog: EntityCatalog, entity_id: str) -> Entity:
    entity = catalog.find_by_id(entity_id)
    if entity is None:
        raise KeyError(f"Entity not found: {entity_id!r}")
    return entity


@router.get("", response_model=EntityListResponse)
async def list_entities(catalog: EntityCatalog = Depends(get_catalog)) -> EntityListResponse:
    snapshot = catalog.snapshot
    return EntityListResponse(
        version=snapshot.version,
        count=len(snapshot),
        entities=list(snapshot.entities),
    )


@router.post("", response_model=Entity, status_code=201)
async def create_entity(
    body: CreateEntityRequest,
    catalog: EntityCatalog = Depends(get_catalog),
) -> Entity:
    try:
        return catalog.create_entity(body.name, body.aliases, body.tags, body.content)
    except RecordValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except (RecordWriteError, CatalogReloadError) as exc:
        raise HTTPException(status_code=503, detail=f"Entity store failed: {exc}")


@router.get("/lookup", response_model=Entity)
async def lookup_entity(
    term: str = Query(..., description="Exact name or alias, case-sensitive"),
    catalog: EntityCatalog = Depends(get_catalog),
) -> Entity:
    entity = catalog.find_by_exact_term(term)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"No entity for term {term!r}")
    return entity


@router.post("/reload", response_model=ReloadReport)
async def reload_entities(catalog: EntityCatalog = Depends(get_catalog)) -> ReloadReport:
    try:
        return catalog.reload()
    except CatalogReloadError as exc:
        raise HTTPException(status_code=503, detail=f"Entity store failed: {exc}")


@router.get("/{entity_id}", response_model=Entity)
async def get_entity(entity_id: str, catalog: EntityCatalog = Depends(get_catalog)) -> Entity:
    return _require(catalog, entity_id)


@router.get("/{entity_id}/content", response_model=EntityContentResponse)
async def get_entity_content(
    entity_id: str,
    catalog: EntityCatalog = Depends(get_catalog),
) -> EntityContentResponse:
    entity = _require(catalog, entity_id)
    return EntityContentResponse(
        entity_id=entity.id,
        content=catalog.load_extended_content(entity),
    )
