from .catalog import CatalogReloadError, CatalogSnapshot, EntityCatalog

__all__ = [
    "CatalogReloadError",
    "CatalogSnapshot",
    "EntityCatalog",
]
