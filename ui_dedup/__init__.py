"""Near-duplicate detection for extracted UI components.

Example usage:

    from ui_dedup import analyze, load_components

    groups = analyze(load_components("components.json"), {"minSimilarityScore": 0.85})
    for group in groups:
        print(group.similarity_score, group.member_ids)
"""

__version__ = "1.0.0"

from .analyzer import (
    AnalysisResult,
    AnalysisStats,
    DeduplicationAnalyzer,
    analyze,
    analyze_async,
)
from .config.thresholds import SimilarityThresholds
from .errors import AnalysisCancelled, DedupError, InputError, InvalidThresholds
from .loader import load_components
from .models import (
    ComponentGroup,
    ComponentRecord,
    ElementNode,
    PairwiseResult,
    PropertySignature,
)
from .report import DeduplicationReport, assemble_report

__all__ = [
    "__version__",
    # Pipeline
    "AnalysisResult",
    "AnalysisStats",
    "DeduplicationAnalyzer",
    "analyze",
    "analyze_async",
    # Inputs
    "ComponentRecord",
    "ElementNode",
    "PropertySignature",
    "SimilarityThresholds",
    "load_components",
    # Outputs
    "ComponentGroup",
    "DeduplicationReport",
    "PairwiseResult",
    "assemble_report",
    # Errors
    "AnalysisCancelled",
    "DedupError",
    "InputError",
    "InvalidThresholds",
]
