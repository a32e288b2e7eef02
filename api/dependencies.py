"""
dependencies.py - FastAPI dependency injection.
Every dependency returns the matching component from Request.app.state.
"""
from __future__ import annotations

from fastapi import Request

from adapters.entity_catalog import EntityCatalog
from adapters.link_detector import RegexLinkDetector
from adapters.markup_renderer import RenderStyle


def get_catalog(request: Request) -> EntityCatalog:
    return request.app.state.catalog


def get_link_detector(request: Request) -> RegexLinkDetector:
    return request.app.state.link_detector


def get_render_style(request: Request) -> RenderStyle:
    return request.app.state.render_style
