"""Catalog layer - snapshot, loader, output schemas and the catalog service."""

from multimart.catalog.loader import CatalogPayload, load_snapshot
from multimart.catalog.service import CatalogService, ServiceResult
from multimart.catalog.snapshot import CatalogSnapshot

__all__ = [
    "CatalogPayload",
    "CatalogService",
    "CatalogSnapshot",
    "ServiceResult",
    "load_snapshot",
]
