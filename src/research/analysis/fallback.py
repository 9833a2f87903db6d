#!/usr/bin/env python3
"""
Template analysis used when the LLM is unavailable or fails for a topic.
"""

from typing import Any, Dict

from ..models.topic import TrendingTopic


def build_fallback_analysis(topic: TrendingTopic) -> Dict[str, Any]:
    """Deterministic placeholder analysis for a topic."""
    name = topic.topic
    gs_papers = topic.gs_papers or []

    return {
        'why_in_news': f"Recent developments related to {name} have gained significant attention in current affairs.",
        'background': "This topic has been evolving in the context of India's development and global changes.",
        'gs_paper_mapping': {
            'primary': gs_papers[0] if gs_papers else 'GS-II',
            'secondary': list(gs_papers[1:]),
            'reasoning': 'Based on the nature of the topic'
        },
        'prelims_facts': [
            'Key fact 1: To be analyzed',
            'Key fact 2: To be analyzed',
            'Key fact 3: To be analyzed',
            'Key fact 4: To be analyzed'
        ],
        'mains_points': {
            'introduction': f"{name} has emerged as an important topic in current affairs with significant implications.",
            'body': {
                'pros': [
                    'Positive aspect 1: Contributes to development',
                    'Positive aspect 2: Addresses key challenges',
                    'Positive aspect 3: Promotes sustainable growth'
                ],
                'cons': [
                    'Challenge 1: Implementation issues',
                    'Challenge 2: Resource constraints',
                    'Challenge 3: Coordination problems'
                ],
                'challenges': [
                    'Challenge 1: Policy implementation',
                    'Challenge 2: Stakeholder coordination'
                ],
                'way_forward': [
                    'Solution 1: Comprehensive planning',
                    'Solution 2: Stakeholder engagement',
                    'Solution 3: Regular monitoring'
                ]
            },
            'conclusion': f"The topic of {name} requires balanced consideration of various factors for optimal outcomes."
        },
        'probable_questions': {
            'prelims': [
                f"With reference to {name}, consider the following statements:",
                'Which of the following is/are correct?'
            ],
            'mains': [
                f"GS-II: Discuss the significance of {name} in the Indian context (150 words)",
                f"GS-III: Analyze the challenges and opportunities presented by {name} (250 words)"
            ]
        },
        'key_terms': [f"{name}: Topic requiring detailed analysis"],
        'connected_topics': [],
        'source_analysis': {
            'reliability': 'Medium',
            'bias': 'Neutral',
            'completeness': 'Partial',
            'recommendation': 'Consult multiple sources for comprehensive understanding'
        }
    }
