"""Services layer for survey-analytics."""
from .upload_service import UploadService
from .plot_service import PlotService
from .analysis_service import AnalysisService, normalize_plots
from .health_service import HealthService, HealthReport, ServiceHealth

__all__ = ["UploadService", "PlotService", "AnalysisService", "normalize_plots",
           "HealthService", "HealthReport", "ServiceHealth"]
