"""
Router: POST /links/detect

Full re-scan of the given text against the current catalog snapshot.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from adapters.entity_catalog import EntityCatalog
from adapters.link_detector import RegexLinkDetector
from api.dependencies import get_catalog, get_link_detector
from api.schemas import DetectRequest, DetectResponse, status_message

router = APIRouter(prefix="/links", tags=["links"])


@router.post("/detect", response_model=DetectResponse)
async def detect_links(
    body: DetectRequest,
    catalog: EntityCatalog = Depends(get_catalog),
    detector: RegexLinkDetector = Depends(get_link_detector),
) -> DetectResponse:
    links = detector.detect(body.text, catalog.snapshot)
    return DetectResponse(count=len(links), message=status_message(len(links)), links=links)
