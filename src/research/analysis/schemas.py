#!/usr/bin/env python3
"""
Centralized JSON schemas for OpenAI structured outputs.

Strict mode requires every property to be listed as required and
additionalProperties to be false at every object level.
"""

from typing import Dict, Any


def _string_list(description: str) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


# Schema for topic relevance scoring
TOPIC_RELEVANCE_SCHEMA = {
    "type": "object",
    "properties": {
        "scores": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "description": "Topic exactly as given in the input list"},
                    "relevance_score": {"type": "number", "description": "UPSC relevance from 0 to 100"},
                    "reasoning": {"type": "string", "description": "Brief explanation of the score"}
                },
                "required": ["topic", "relevance_score", "reasoning"],
                "additionalProperties": False
            }
        }
    },
    "required": ["scores"],
    "additionalProperties": False
}

# Schema for the structured UPSC analysis of one topic
TOPIC_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "why_in_news": {"type": "string", "description": "Why the topic is in the news (2-3 sentences)"},
        "background": {"type": "string", "description": "Historical context (3-4 sentences)"},
        "gs_paper_mapping": {
            "type": "object",
            "properties": {
                "primary": {"type": "string", "description": "Primary GS paper (GS-I to GS-IV)"},
                "secondary": _string_list("Other relevant GS papers"),
                "reasoning": {"type": "string"}
            },
            "required": ["primary", "secondary", "reasoning"],
            "additionalProperties": False
        },
        "prelims_facts": _string_list("Key dates, numbers, articles and organizations"),
        "mains_points": {
            "type": "object",
            "properties": {
                "introduction": {"type": "string"},
                "body": {
                    "type": "object",
                    "properties": {
                        "pros": _string_list("Advantages with explanation"),
                        "cons": _string_list("Disadvantages with explanation"),
                        "challenges": _string_list("Challenges with explanation"),
                        "way_forward": _string_list("Solutions with explanation")
                    },
                    "required": ["pros", "cons", "challenges", "way_forward"],
                    "additionalProperties": False
                },
                "conclusion": {"type": "string"}
            },
            "required": ["introduction", "body", "conclusion"],
            "additionalProperties": False
        },
        "probable_questions": {
            "type": "object",
            "properties": {
                "prelims": _string_list("Multiple choice questions"),
                "mains": _string_list("Mains questions with GS paper and word limit")
            },
            "required": ["prelims", "mains"],
            "additionalProperties": False
        },
        "key_terms": _string_list("Important terms with brief definitions"),
        "connected_topics": _string_list("Related topics with brief connection"),
        "source_analysis": {
            "type": "object",
            "properties": {
                "reliability": {"type": "string", "enum": ["High", "Medium", "Low"]},
                "bias": {"type": "string", "enum": ["Neutral", "Left-leaning", "Right-leaning"]},
                "completeness": {"type": "string", "enum": ["Comprehensive", "Partial", "Limited"]},
                "recommendation": {"type": "string"}
            },
            "required": ["reliability", "bias", "completeness", "recommendation"],
            "additionalProperties": False
        }
    },
    "required": [
        "why_in_news", "background", "gs_paper_mapping", "prelims_facts", "mains_points",
        "probable_questions", "key_terms", "connected_topics", "source_analysis"
    ],
    "additionalProperties": False
}

# Fields that must be non-empty for an analysis to be accepted
REQUIRED_ANALYSIS_FIELDS = [
    'why_in_news', 'background', 'gs_paper_mapping', 'prelims_facts', 'mains_points', 'probable_questions'
]

SCHEMAS = {
    "relevance": TOPIC_RELEVANCE_SCHEMA,
    "analysis": TOPIC_ANALYSIS_SCHEMA
}


def get_schema_by_type(schema_type: str) -> Dict[str, Any]:
    """
    Get schema by analysis type.

    Args:
        schema_type: Type of schema ("relevance", "analysis")

    Returns:
        JSON schema dictionary

    Raises:
        ValueError: If schema type is not found
    """
    if schema_type not in SCHEMAS:
        raise ValueError(f"Unknown schema type: {schema_type}. Available: {list(SCHEMAS.keys())}")
    return SCHEMAS[schema_type]
