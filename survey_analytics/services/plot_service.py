"""
Plot and group-by service over stored CSV uploads.

Requests are validated first, then the upload is resolved and ownership
checked, and only then is the file streamed (in a worker thread).
"""
from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError as PydanticValidationError

from ..domain.ownership import Requester
from ..errors import PlotDataEmptyError, StorageReadError, ValidationError
from ..tabular import (
    ColorPicker,
    PlotRequest,
    PlotRequestError,
    PlotResult,
    TabularReadError,
    ValueCounts,
    build_plot_data,
    group_by_columns,
    validate_plot_request,
)
from .upload_service import UploadService

logger = logging.getLogger(__name__)


class PlotService:
    def __init__(self, uploads: UploadService, chunk_rows: int, color_seed: int | None = None) -> None:
        self._uploads = uploads
        self._chunk_rows = chunk_rows
        self._color_seed = color_seed

    async def plot_data(
        self,
        requester: Requester,
        csv_upload_id: str | None,
        plot_type: str | None,
        x_axis: str | None,
        y_axes: list[str] | None,
    ) -> PlotResult:
        if not plot_type or not csv_upload_id:
            raise ValidationError("Plot type and CSV upload ID are required")
        try:
            request = PlotRequest(plot_type=plot_type, x_axis=x_axis, y_axes=y_axes)
        except PydanticValidationError as exc:
            raise ValidationError(f"Unsupported plot type: {plot_type}") from exc
        try:
            validate_plot_request(request)
        except PlotRequestError as exc:
            raise ValidationError(str(exc)) from exc

        stored = await self._uploads.get_upload(requester, csv_upload_id)
        try:
            result = await asyncio.to_thread(
                build_plot_data,
                stored.file_path,
                request,
                colors=ColorPicker(self._color_seed),
                chunk_rows=self._chunk_rows,
            )
        except TabularReadError as exc:
            logger.error("Error generating plot data for upload %s: %s", csv_upload_id, exc)
            raise StorageReadError(str(exc), message="Failed to generate plot data") from exc

        if not result.data:
            raise PlotDataEmptyError("The CSV may not contain appropriate data for the selected plot type and axes")
        return result

    async def group_by(self, requester: Requester, csv_upload_id: str | None, columns: list[str] | None) -> dict[str, ValueCounts]:
        if not columns or not csv_upload_id:
            raise ValidationError("Columns and CSV upload ID are required")

        stored = await self._uploads.get_upload(requester, csv_upload_id)
        try:
            return await asyncio.to_thread(group_by_columns, stored.file_path, columns, self._chunk_rows)
        except TabularReadError as exc:
            logger.error("Error grouping upload %s: %s", csv_upload_id, exc)
            raise StorageReadError(str(exc), message="Failed to group data") from exc
