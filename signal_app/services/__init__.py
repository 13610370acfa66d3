"""Services wiring snapshot providers to the signal core."""

from signal_app.services.analysis import AnalysisService, Recommendation, SnapshotProvider
from signal_app.services.snapshot_files import JsonFileSnapshotProvider

__all__ = [
    "AnalysisService",
    "Recommendation",
    "SnapshotProvider",
    "JsonFileSnapshotProvider",
]
