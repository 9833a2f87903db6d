"""Topic analysis generation."""

from .generator import AnalysisGenerator
from .fallback import build_fallback_analysis
from .prompts import ResearchPrompts
from .schemas import get_schema_by_type, REQUIRED_ANALYSIS_FIELDS

__all__ = [
    'AnalysisGenerator',
    'build_fallback_analysis',
    'ResearchPrompts',
    'get_schema_by_type',
    'REQUIRED_ANALYSIS_FIELDS'
]
