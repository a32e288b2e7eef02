"""
Router: POST /export/{fmt}

Renders text with entity links to rtf / html / md. Links are detected against
the current catalog when the request does not carry them.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from adapters.entity_catalog import EntityCatalog
from adapters.link_detector import RegexLinkDetector
from adapters.markup_renderer import RenderStyle, get_renderer
from api.dependencies import get_catalog, get_link_detector, get_render_style
from api.schemas import ExportRequest

router = APIRouter(prefix="/export", tags=["export"])


@router.post("/{fmt}")
async def export_document(
    fmt: str,
    body: ExportRequest,
    catalog: EntityCatalog = Depends(get_catalog),
    detector: RegexLinkDetector = Depends(get_link_detector),
    style: RenderStyle = Depends(get_render_style),
) -> Response:
    try:
        renderer = get_renderer(fmt, style)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown export format: {fmt!r}")

    links = body.links if body.links is not None else detector.detect(body.text, catalog.snapshot)
    content = renderer.render(body.text, body.title, links)
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"X-Link-Count": str(len(links))},
    )
