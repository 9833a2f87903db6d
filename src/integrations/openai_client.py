#!/usr/bin/env python3
"""
OpenAI integration for current affairs research.

Provides AI-powered steps of the research pipeline:
- Relevance scoring of detected trending topics
- Structured UPSC analysis generation per topic
"""

import json
import logging
from typing import List, Dict, Optional, Any, Tuple

from openai import OpenAI

from research.analysis.prompts import ResearchPrompts
from research.analysis.schemas import get_schema_by_type
from research.exceptions import ConfigurationError, LLMError
from research.models.article import Article
from research.models.topic import TrendingTopic

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Client for OpenAI API integration with structured outputs."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o"):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Chat model used for every request

        Raises:
            ConfigurationError: If no API key is given
        """
        if not api_key:
            raise ConfigurationError('OPENAI_API_KEY', 'OpenAI API key not provided')

        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.relevance_max_tokens = 2000
        self.analysis_max_tokens = 4000

    def _make_structured_request(self, messages: List[Dict[str, str]], schema: Dict[str, Any],
                                 analysis_type: str, temperature: float,
                                 max_tokens: int) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Make a structured request to OpenAI API with JSON schema enforcement.

        Returns:
            Tuple of (parsed JSON content, token usage)

        Raises:
            LLMError: On API failure, truncation or unparsable content
        """
        logger.info(f"Making OpenAI structured API call for {analysis_type}")
        logger.debug(f"Prompt for {analysis_type}:\n{messages[-1]['content']}")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": f"{analysis_type}_response",
                        "schema": schema,
                        "strict": True
                    }
                }
            )

            finish_reason = getattr(response.choices[0], "finish_reason", None)
            if finish_reason == "length":
                raise ValueError(f"OpenAI response truncated (finish_reason=length, max_tokens={max_tokens})")

            content = json.loads(response.choices[0].message.content)
        except Exception as e:
            logger.error(f"OpenAI structured API request failed for {analysis_type}: {e}")
            raise LLMError('openai', self.model, e) from e

        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens
            }
        logger.info(f"OpenAI API call successful - tokens: {usage.get('total_tokens', 'unknown')} total")
        return content, usage

    def score_topic_relevance(self, topics: List[Dict[str, Any]], articles: List[Article]) -> List[Dict[str, Any]]:
        """
        Score topics for UPSC relevance.

        Args:
            topics: Dicts with 'topic' and 'frequency'
            articles: Articles used as prompt context

        Returns:
            List of {'topic', 'relevance_score', 'reasoning'}
        """
        messages = [
            {"role": "system", "content": ResearchPrompts.RELEVANCE_SYSTEM_PROMPT},
            {"role": "user", "content": ResearchPrompts.get_relevance_prompt(topics, articles)}
        ]
        content, _ = self._make_structured_request(
            messages, get_schema_by_type("relevance"), "topic_relevance",
            temperature=0.3, max_tokens=self.relevance_max_tokens
        )
        return content.get("scores", [])

    def generate_topic_analysis(self, topic: TrendingTopic) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Generate the structured UPSC analysis of one topic.

        Args:
            topic: Trending topic with sources

        Returns:
            Tuple of (analysis dict, metadata with model and usage)
        """
        messages = [
            {"role": "system", "content": ResearchPrompts.ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": ResearchPrompts.get_analysis_prompt(topic)}
        ]
        analysis, usage = self._make_structured_request(
            messages, get_schema_by_type("analysis"), "topic_analysis",
            temperature=0.4, max_tokens=self.analysis_max_tokens
        )
        return analysis, {"model": self.model, "usage": usage}
