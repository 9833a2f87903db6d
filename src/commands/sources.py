#!/usr/bin/env python3
"""
Source command endpoints for listing and seeding news sources.
"""

import logging
from argparse import Namespace

from .base import BaseCommand

logger = logging.getLogger(__name__)


class SourcesCommand(BaseCommand):
    """Manage configured news sources."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute sources subcommand."""
        try:
            if subcommand == "list":
                return self.list(args)
            elif subcommand == "seed":
                return self.seed(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"sources {subcommand}")

    def list(self, args: Namespace) -> int:
        """List configured news sources."""
        sources = self.queries.list_sources(active_only=getattr(args, 'active', False))

        if not sources:
            print("No news sources configured (runs fall back to sample articles)")
            return 0

        print(f"\n=== News Sources ({len(sources)}) ===")
        for source in sources:
            status = '✅' if source.is_active else '⏸️ '
            last = source.last_fetched.strftime('%m-%d %H:%M') if source.last_fetched else 'never'
            print(f"{status} {source.name} [{source.type}] reliability={source.reliability_score} "
                  f"ok={source.success_count} errors={source.error_count} last={last}")
        return 0

    def seed(self, args: Namespace) -> int:
        """Seed the default development sources."""
        sources = self.queries.seed_sources(newsapi_key=self.config.integrations.newsapi_key)
        print(f"✅ Seeded {len(sources)} news sources:")
        for source in sources:
            print(f"   • {source.name} ({source.type})")
        return 0
