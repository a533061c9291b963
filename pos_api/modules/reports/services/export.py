"""
Report export as a JSON document or a CSV attachment.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Union

from fastapi import Response

from pos_api.common.exceptions import ValidationError
from . import REPORTS, build_report, parse_report_type
from ..schemas import ExportFormat, ExportRequest
from ..utils import create_csv_response, csv_headers_for
from .base import BaseReportService, window_from_dates

logger = logging.getLogger(__name__)


class ReportExportService(BaseReportService):

    def export(self, request: ExportRequest) -> Union[Dict[str, Any], Response]:
        if not request.report_type:
            raise ValidationError("Report type is required")
        report_type = parse_report_type(request.report_type)

        window = window_from_dates(request.start_date, request.end_date, request.group_by)
        data = build_report(self.db, report_type, window)
        logger.info(f"Exporting {report_type.value} report as {request.format.value}")

        if request.format == ExportFormat.CSV:
            filename = f"{report_type.value}_{window.start:%Y%m%d}_{window.end:%Y%m%d}.csv"
            return create_csv_response(
                REPORTS[report_type].rows(data),
                filename,
                csv_headers_for(report_type, request.group_by)
            )

        return {
            "report_type": report_type.value,
            "format": request.format.value,
            "generated_at": datetime.now(),
            "data": data,
            "options": request.options,
        }
