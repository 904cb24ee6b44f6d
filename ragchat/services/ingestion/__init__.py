"""Document ingestion: section splitting and the ingestion orchestrator."""

from ragchat.services.ingestion.ingestion_service import IngestionService
from ragchat.services.ingestion.splitter import SectionSplitter

__all__ = ["IngestionService", "SectionSplitter"]
