"""Ingestion orchestration services."""

from fieldops_ingestion.services.import_service import ImportService

__all__ = ["ImportService"]
