"""Output generation: result tables and dual-format file writing."""

from phenoprior.output.evidence_summary import RESULT_COLUMNS, results_to_frame
from phenoprior.output.writers import write_priority_output

__all__ = [
    "RESULT_COLUMNS",
    "results_to_frame",
    "write_priority_output",
]
