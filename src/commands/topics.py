#!/usr/bin/env python3
"""
Topic command endpoints for browsing stored trending topics.
"""

import json
import logging
from argparse import Namespace

from .base import BaseCommand
from research.database.base import TopicFilters

logger = logging.getLogger(__name__)


class TopicsCommand(BaseCommand):
    """Browse and manage trending topics."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute topics subcommand."""
        try:
            if subcommand == "list":
                return self.list(args)
            elif subcommand == "show":
                return self.show(args)
            elif subcommand == "deactivate":
                return self.deactivate(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"topics {subcommand}")

    def list(self, args: Namespace) -> int:
        """List trending topics."""
        filters = TopicFilters(
            limit=args.limit,
            category=getattr(args, 'category', None),
            min_relevance_score=getattr(args, 'min_relevance', 0) or 0,
            is_active=None if getattr(args, 'all', False) else True,
            sort_by=getattr(args, 'sort_by', 'relevance_score')
        )
        topics = self.queries.get_trending_topics(filters)

        if getattr(args, 'json', False):
            print(json.dumps([topic.to_dict() for topic in topics], indent=2, ensure_ascii=False))
            return 0

        if not topics:
            print("No trending topics found")
            return 0

        print(f"\n=== Trending Topics ({len(topics)}) ===")
        for topic in topics:
            marker = '' if topic.is_active else ' (inactive)'
            print(f"[{topic.relevance_score:5.1f}] {topic.topic}{marker}")
            print(f"        id={topic.id} category={topic.category} frequency={topic.frequency} "
                  f"gs={','.join(topic.gs_papers) or '-'}")
        return 0

    def show(self, args: Namespace) -> int:
        """Show the stored analysis of a topic."""
        result = self.queries.get_topic_analysis(args.topic_id)

        if getattr(args, 'json', False):
            print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
            return 0

        metadata = result['metadata']
        print(f"\n=== {result['topic']} ===")
        print(f"Category: {metadata['category']} | GS: {', '.join(metadata['gs_papers']) or '-'}")
        print(f"Relevance: {metadata['relevance_score']} | Frequency: {metadata['frequency']} "
              f"| Sources: {metadata['source_count']}")

        analysis = result['analysis']
        if not analysis:
            print("\nNo analysis generated yet")
        else:
            if analysis.get('why_in_news'):
                print(f"\nWhy in news: {analysis['why_in_news']}")
            if analysis.get('background'):
                print(f"\nBackground: {analysis['background']}")
            for fact in analysis.get('prelims_facts') or []:
                print(f"  • {fact}")
            for question in analysis.get('probable_questions') or []:
                print(f"  ? {question}")

        if result['sources']:
            print(f"\n=== Sources ===")
            for source in result['sources']:
                print(f"  • {source['name']}: {source['url']}")
        return 0

    def deactivate(self, args: Namespace) -> int:
        """Soft-delete a topic."""
        topic = self.queries.deactivate_topic(args.topic_id)
        print(f"✅ Deactivated topic '{topic.topic}'")
        return 0
