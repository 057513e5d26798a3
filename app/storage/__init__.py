from .analysis_store import AnalysisStore, AnalysisStoreError, RecordFinalizedError, get_analysis_store

__all__ = [
    "AnalysisStore",
    "AnalysisStoreError",
    "RecordFinalizedError",
    "get_analysis_store",
]
