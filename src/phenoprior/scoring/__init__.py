"""Score assembly, rank normalisation and run orchestration."""

from phenoprior.scoring.assembler import GeneScoreAssembler
from phenoprior.scoring.context import PhaseOrderError, RunContext, RunPhase
from phenoprior.scoring.evidence_text import NO_EVIDENCE_TEXT, format_evidence_text
from phenoprior.scoring.prioritiser import PrioritisationRun, Prioritiser
from phenoprior.scoring.rank_normalizer import RankNormalizer
from phenoprior.scoring.results import CandidateGene, PrioritisationSummary, PriorityResult

__all__ = [
    "CandidateGene",
    "PriorityResult",
    "PrioritisationSummary",
    "RunContext",
    "RunPhase",
    "PhaseOrderError",
    "GeneScoreAssembler",
    "RankNormalizer",
    "format_evidence_text",
    "NO_EVIDENCE_TEXT",
    "Prioritiser",
    "PrioritisationRun",
]
