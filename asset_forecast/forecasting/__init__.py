"""FC and CS computation engines."""

from .results import FcOutput, CsOutput
from .fc_engine import compute_fc_output
from .cs_engine import compute_cs_output

__all__ = [
    "FcOutput",
    "CsOutput",
    "compute_fc_output",
    "compute_cs_output",
]
