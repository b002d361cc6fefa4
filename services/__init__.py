# Services package
from .advanced_stats_service import AdvancedStatsService
from .document_store import DocumentStore
from .stats_service import StatsService

__all__ = ["StatsService", "AdvancedStatsService", "DocumentStore"]
