"""Mod portal catalog: download, schemas and loading into ModRecords."""

from mod_crater.catalog.loader import CatalogPaths, build_record, load_catalog
from mod_crater.catalog.portal import DownloadSummary, PortalClient, download_catalog

__all__ = [
    "CatalogPaths",
    "DownloadSummary",
    "PortalClient",
    "build_record",
    "download_catalog",
    "load_catalog",
]
