"""Business services."""

from app.services.analysis_service import AnalysisResult, AnalysisService

__all__ = [
    "AnalysisResult",
    "AnalysisService",
]
