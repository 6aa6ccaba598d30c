"""Repository layer for survey-analytics."""
from .upload_repository import UploadRepository, StoredFile
from .analysis_repository import AnalysisRepository, Analysis

__all__ = ["UploadRepository", "StoredFile", "AnalysisRepository", "Analysis"]
