#!/usr/bin/env python3
"""
Analysis result data models.

Contains the tagged result returned for every topic of a batch, whether the
analysis came from the LLM or from the fallback template.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

# Sections copied onto the topic record when an analysis is saved
RESEARCH_DATA_FIELDS = ['why_in_news', 'background', 'prelims_facts', 'mains_points', 'probable_questions']


@dataclass
class AnalysisResult:
    """Outcome of analysis generation for one topic."""
    success: bool
    analysis: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def topic(self) -> Optional[str]:
        return self.metadata.get('topic')

    def research_data(self) -> Dict[str, Any]:
        """Subset of the analysis stored on the trending topic."""
        return {key: self.analysis.get(key) for key in RESEARCH_DATA_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        metadata = dict(self.metadata)
        generated_at = metadata.get('generated_at')
        if isinstance(generated_at, datetime):
            metadata['generated_at'] = generated_at.isoformat()
        return {
            'success': self.success,
            'analysis': self.analysis,
            'metadata': metadata,
            'error': self.error
        }
