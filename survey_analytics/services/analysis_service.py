"""
Analysis service: save, list, fetch, update, delete and publish analyses.

Every path that touches an existing analysis checks ownership first.
"""
from __future__ import annotations

import dataclasses
import logging
import sqlite3
from typing import Any

from ..domain.ownership import Requester, ensure_owner
from ..domain.types import DEFAULT_ANALYSIS_TITLE, DEFAULT_AUTHOR_NAME, DEFAULT_PLOT_TITLE
from ..errors import ConflictError, NotFoundError, ValidationError
from ..repositories import Analysis, AnalysisRepository
from ..uploads import generate_id

logger = logging.getLogger(__name__)


def normalize_plots(plots: Any) -> list[dict[str, Any]]:
    """Validate plot entries and fill in per-plot defaults.

    Every entry needs a ``type`` and non-empty ``data``.
    """
    if plots is None or not isinstance(plots, list):
        raise ValidationError("INVALID_PLOTS_FORMAT", message="Plots must be an array")

    normalized: list[dict[str, Any]] = []
    for index, plot in enumerate(plots, start=1):
        if not isinstance(plot, dict):
            raise ValidationError(f"Plot #{index} must be an object")
        if not plot.get("type"):
            raise ValidationError(f"Plot #{index} is missing required field: type")
        if not plot.get("data"):
            raise ValidationError(f"Plot #{index} is missing required field: data")
        normalized.append({
            "title": plot.get("title") or DEFAULT_PLOT_TITLE,
            "type": plot["type"],
            "configuration": plot.get("configuration") or {
                "xAxis": plot.get("xAxis") or "",
                "yAxes": plot.get("yAxes") or [],
            },
            "data": plot["data"],
        })
    return normalized


class AnalysisService:
    def __init__(self, analyses: AnalysisRepository) -> None:
        self._analyses = analyses

    async def save(
        self,
        requester: Requester,
        plots: Any,
        title: str | None = None,
        author_name: str | None = None,
        description: str | None = None,
    ) -> Analysis:
        validated = normalize_plots(plots)
        try:
            analysis = await self._analyses.create_async(
                generate_id(),
                requester.user_id,
                title or DEFAULT_ANALYSIS_TITLE,
                author_name or requester.username or DEFAULT_AUTHOR_NAME,
                description or "",
                validated,
            )
        except sqlite3.IntegrityError as exc:
            raise ConflictError("A record with this information already exists.") from exc
        logger.info("Created analysis %s with %d plot(s)", analysis.analysis_id, len(validated))
        return analysis

    async def list_analyses(self, requester: Requester) -> list[Analysis]:
        return await self._analyses.list_for_user_async(requester.user_id)

    async def get(self, requester: Requester, analysis_id: str, action: str = "access") -> Analysis:
        analysis = await self._analyses.get_async(analysis_id)
        if analysis is None:
            raise NotFoundError("Analysis not found")
        ensure_owner(analysis.user_id, requester, action, "analysis")
        return analysis

    async def update(
        self,
        requester: Requester,
        analysis_id: str,
        title: str | None = None,
        author_name: str | None = None,
        description: str | None = None,
        plots: Any = None,
    ) -> Analysis:
        """Merge supplied fields into the analysis. ``None`` means "not supplied"."""
        analysis = await self.get(requester, analysis_id, action="update")
        changes: dict[str, Any] = {
            "title": title or analysis.title,
            "author_name": author_name or analysis.author_name,
            "description": description if description is not None else analysis.description,
        }
        if plots is not None:
            changes["plots"] = normalize_plots(plots)
        return await self._analyses.save_async(dataclasses.replace(analysis, **changes))

    async def delete(self, requester: Requester, analysis_id: str) -> None:
        analysis = await self.get(requester, analysis_id, action="delete")
        await self._analyses.delete_async(analysis.analysis_id)
        logger.info("Deleted analysis %s", analysis_id)

    async def publish(self, requester: Requester, analysis_id: str | None) -> Analysis:
        if not analysis_id:
            raise ValidationError("Analysis ID is required")
        analysis = await self.get(requester, analysis_id, action="publish")
        if analysis.is_public:
            return analysis
        return await self._analyses.save_async(dataclasses.replace(analysis, is_public=True))
