"""Workbook parity, multi-month overview and briefing export."""

from .parity import ParityReport, ParityResult, run_parity_check
from .overview import build_overview
from .briefing import (
    BriefingAssignment,
    detail_rows_to_assignments,
    cs_output_to_minimal_assignments,
)

__all__ = [
    "ParityReport",
    "ParityResult",
    "run_parity_check",
    "build_overview",
    "BriefingAssignment",
    "detail_rows_to_assignments",
    "cs_output_to_minimal_assignments",
]
