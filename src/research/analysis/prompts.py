#!/usr/bin/env python3
"""
AI prompts for UPSC current affairs research.

Centralizes the prompt templates used for topic relevance scoring and for
structured topic analysis.
"""

import re
from typing import List, Dict, Any

from ..models.article import Article
from ..models.topic import TrendingTopic

MAX_CONTEXT_ARTICLES = 5
MAX_CONTEXT_SOURCES = 5


def _sanitize_content(text: str, limit: int = 500) -> str:
    """
    Sanitize article text before it is placed into a prompt.

    Args:
        text: Raw text from feeds or APIs
        limit: Maximum length kept

    Returns:
        Sanitized text safe for prompt inclusion
    """
    if not text:
        return ""

    injection_patterns = [
        r'ignore\s+previous\s+instructions?',
        r'forget\s+everything\s+above',
        r'new\s+instructions?:',
        r'system\s*:',
        r'assistant\s*:',
        r'role\s*:\s*system',
    ]

    sanitized = text
    for pattern in injection_patterns:
        sanitized = re.sub(pattern, '[FILTERED]', sanitized, flags=re.IGNORECASE)

    if len(sanitized) > limit:
        sanitized = sanitized[:limit - 3] + "..."

    return sanitized.strip()


class ResearchPrompts:
    """Prompt templates for the research pipeline."""

    RELEVANCE_SYSTEM_PROMPT = (
        "You are an expert UPSC CSE mentor analyzing current affairs topics for relevance to the UPSC syllabus.\n\n"
        "For each topic, provide a relevance score (0-100) based on:\n"
        "- Importance for UPSC prelims/mains\n"
        "- Current significance and impact\n"
        "- Likelihood of appearing in questions\n"
        "- Connection to syllabus topics\n\n"
        "Return one entry per input topic, copying the topic text exactly."
    )

    ANALYSIS_SYSTEM_PROMPT = (
        "You are an expert UPSC CSE mentor creating structured current affairs content.\n\n"
        "For the given topic produce: why it is in the news (2-3 sentences), historical background "
        "(3-4 sentences), GS paper mapping with reasoning, at least four prelims facts (dates, numbers, "
        "constitutional articles, organizations), mains points (introduction, pros, cons, challenges, way "
        "forward, conclusion), probable prelims and mains questions, key terms, connected topics and an "
        "assessment of the sources.\n\n"
        "Requirements:\n"
        "1. Keep content concise but comprehensive\n"
        "2. Use UPSC-appropriate language and terminology\n"
        "3. Ensure factual accuracy\n"
        "4. Include specific examples, dates, and references where possible\n"
        "5. Make questions realistic for UPSC standard"
    )

    @staticmethod
    def get_relevance_prompt(topics: List[Dict[str, Any]], articles: List[Article]) -> str:
        """
        Build the user prompt for relevance scoring.

        Args:
            topics: Dicts with 'topic' and 'frequency'
            articles: Articles the topics were extracted from (first few used as context)
        """
        topics_text = "\n".join(f"- {item['topic']} (frequency: {item['frequency']})" for item in topics)
        articles_context = "\n\n".join(
            _sanitize_content(f"{article.title}: {article.description}", limit=200)
            for article in articles[:MAX_CONTEXT_ARTICLES]
        )

        return (
            "Analyze these topics for UPSC relevance:\n\n"
            f"TOPICS:\n{topics_text}\n\n"
            f"RECENT ARTICLES CONTEXT:\n{articles_context}\n\n"
            "Rate each topic's relevance to UPSC CSE syllabus and current affairs preparation."
        )

    @staticmethod
    def get_analysis_prompt(topic: TrendingTopic) -> str:
        """Build the user prompt for one topic's structured analysis."""
        context_articles = "\n\n".join(
            f"Source: {source.name}\n"
            f"Title: {_sanitize_content(source.snippet)}\n"
            f"URL: {source.url}\n"
            f"Date: {source.publish_date.date().isoformat() if source.publish_date else 'Recent'}"
            for source in topic.sources[:MAX_CONTEXT_SOURCES]
        )
        gs_papers = ', '.join(topic.gs_papers) if topic.gs_papers else 'To be determined'

        return (
            "Generate comprehensive UPSC CSE analysis for this current affairs topic:\n\n"
            f"TOPIC: {topic.topic}\n"
            f"CATEGORY: {topic.category}\n"
            f"GS PAPERS: {gs_papers}\n"
            f"RELEVANCE SCORE: {topic.relevance_score:.0f}/100\n\n"
            f"SOURCE ARTICLES:\n{context_articles}\n\n"
            "Focus areas:\n"
            "- Recent developments and why it's trending\n"
            "- Historical background and evolution\n"
            "- Key facts for prelims preparation\n"
            "- Balanced analysis for mains answers\n"
            "- Realistic probable questions\n"
            "- Related concepts and connections"
        )
