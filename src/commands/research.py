#!/usr/bin/env python3
"""
Research command endpoints: execute, retry and inspect research runs.
"""

import json
import logging
from argparse import Namespace
from datetime import timedelta
from typing import Any, Dict

from .base import BaseCommand
from research.database.base import RunFilters
from research.models.article import parse_datetime_safe
from research.models.research_config import DateRange, DEFAULT_LOOKBACK_DAYS

logger = logging.getLogger(__name__)


def build_run_overrides(args: Namespace) -> Dict[str, Any]:
    """Translate CLI flags into research configuration overrides."""
    overrides: Dict[str, Any] = {}

    date_from = getattr(args, 'date_from', None)
    date_to = getattr(args, 'date_to', None)
    days = getattr(args, 'days', None) or DEFAULT_LOOKBACK_DAYS
    if date_from or date_to:
        if not date_from:
            # the lookback window ends at --to
            end = parse_datetime_safe(date_to)
            date_from = (end - timedelta(days=days)).isoformat() if end else None
        overrides['date_range'] = {
            'from': date_from,
            'to': date_to or DateRange.last_days(days).end.isoformat()
        }
    elif getattr(args, 'days', None):
        overrides['date_range'] = DateRange.last_days(args.days)
    if getattr(args, 'sources', None):
        overrides['sources'] = args.sources
    if getattr(args, 'categories', None):
        overrides['categories'] = args.categories
    if getattr(args, 'keywords', None):
        overrides['keywords'] = args.keywords
    if getattr(args, 'min_relevance', None) is not None:
        overrides['min_relevance_score'] = args.min_relevance
    if getattr(args, 'max_topics', None) is not None:
        overrides['max_topics'] = args.max_topics
    if getattr(args, 'min_topics', None) is not None:
        overrides['min_topics'] = args.min_topics
    if getattr(args, 'no_analysis', False):
        overrides['generate_analysis'] = False
    if getattr(args, 'no_db', False):
        overrides['update_database'] = False
    if getattr(args, 'type', None):
        overrides['type'] = args.type

    return overrides


class ResearchCommand(BaseCommand):
    """Run and inspect current affairs research."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute research subcommand."""
        try:
            if subcommand == "run":
                return self.run(args)
            elif subcommand == "retry":
                return self.retry(args)
            elif subcommand == "history":
                return self.history(args)
            elif subcommand == "show":
                return self.show(args)
            elif subcommand == "stats":
                return self.stats(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"research {subcommand}")

    def _print_outcome(self, outcome, as_json: bool) -> None:
        data = outcome.to_dict()
        if as_json:
            print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
            return

        summary = data['summary']
        print(f"\n=== Research Run {outcome.run_id} ===")
        print(f"📰 Articles fetched: {summary['articles_fetched']}")
        print(f"📈 Trending topics: {summary['trending_topics_detected']}")
        print(f"🧠 Analyses generated: {summary['analyses_generated']}")
        print(f"💾 Topics created/updated: {summary['database_updates']['created']}"
              f"/{summary['database_updates']['updated']}")
        print(f"⏱️  Duration: {summary['duration_ms']} ms")

        if outcome.topics:
            print(f"\n=== Topics ===")
            for topic in outcome.topics:
                print(f"  • [{topic.relevance_score:.0f}] {topic.topic} ({topic.category}, "
                      f"{', '.join(topic.gs_papers) or 'no GS mapping'})")

    def run(self, args: Namespace) -> int:
        """Execute a new research run."""
        overrides = build_run_overrides(args)
        print(f"🔎 Starting research run...")
        outcome = self.controller.execute_research(overrides, triggered_by='cli')
        self._print_outcome(outcome, getattr(args, 'json', False))
        return 0

    def retry(self, args: Namespace) -> int:
        """Retry a finished research run."""
        print(f"🔁 Retrying research run {args.run_id}...")
        outcome = self.controller.retry_research(args.run_id, triggered_by='cli')
        self._print_outcome(outcome, getattr(args, 'json', False))
        return 0

    def history(self, args: Namespace) -> int:
        """List past research runs."""
        filters = RunFilters(
            limit=args.limit,
            status=getattr(args, 'status', None),
            type=getattr(args, 'type', None),
            sort_by=getattr(args, 'sort_by', 'created_at')
        )
        runs = self.queries.get_research_history(filters)

        if not runs:
            print("No research runs found")
            return 0

        print(f"\n=== Research History ({len(runs)} runs) ===")
        for run in runs:
            started = run.start_time.strftime('%m-%d %H:%M') if run.start_time else '--'
            print(f"[{started}] {run.run_id} {run.status.value:<9} {run.type.value:<12} "
                  f"topics={run.results.topics_found} retries={run.retry_count}")
        return 0

    def show(self, args: Namespace) -> int:
        """Show one research run with its logs and errors."""
        run = self.queries.get_research_run(args.run_id)

        if getattr(args, 'json', False):
            print(json.dumps(run.to_dict(), indent=2, ensure_ascii=False, default=str))
            return 0

        print(f"\n=== Research Run {run.run_id} ===")
        print(f"Status: {run.status.value} ({run.progress.percentage}%, {run.progress.current_step or '-'})")
        print(f"Type: {run.type.value}")
        if run.retried_from:
            print(f"Retried from: {run.retried_from} (retry {run.retry_count}/{run.max_retries})")
        if run.duration_ms is not None:
            print(f"Duration: {run.duration_ms} ms")
        print(f"Results: {run.results.to_dict()}")

        if run.errors:
            print(f"\n=== Errors ===")
            for error in run.errors:
                print(f"  ❌ [{error.step}] {error.error}")

        print(f"\n=== Logs ===")
        for entry in run.logs:
            print(f"  [{entry.timestamp.strftime('%H:%M:%S')}] {entry.level.value.upper():<5} {entry.message}")
        return 0

    def stats(self, args: Namespace) -> int:
        """Show topic and run statistics."""
        stats = self.queries.get_research_stats()
        topics = stats['topics']

        print(f"\n=== Research Statistics ===")
        print(f"📊 Topics: {topics['total_topics']} total, {topics['active_topics']} active")
        print(f"📊 Average relevance: {topics['avg_relevance_score']:.1f}, "
              f"average frequency: {topics['avg_frequency']:.1f}")
        if topics['categories']:
            print(f"📊 Categories: {', '.join(topics['categories'])}")

        print(f"📈 Runs by status:")
        for status, count in sorted(stats['research_runs'].items()):
            print(f"  • {status}: {count}")

        recent = stats['recent_activity']
        print(f"🕐 Last 30 days: {recent['runs_last_30_days']} runs, {recent['topics_last_30_days']} new topics")
        return 0
