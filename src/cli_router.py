#!/usr/bin/env python3
"""
CLI Router for the current affairs research engine.

Parses `command subcommand [options]` and dispatches to the command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

from commands import get_command, COMMANDS
from research.models.research_config import RunType
from research.database.base import TOPIC_SORT_FIELDS, RUN_SORT_FIELDS

logger = logging.getLogger(__name__)

RUN_STATUSES = ['scheduled', 'running', 'completed', 'failed', 'cancelled']


class CLIRouter:
    """
    CLI router for research commands.

    Command structure:
    - python run.py research run --days 3 --keywords economy climate
    - python run.py research retry <run_id>
    - python run.py topics list --category Economy
    - python run.py sources seed
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self.container = container
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Current affairs research engine for UPSC preparation",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_research_parser(subparsers)
        self._add_topics_parser(subparsers)
        self._add_sources_parser(subparsers)

        return parser

    def _add_research_parser(self, subparsers):
        """Add research command parser."""
        research_parser = subparsers.add_parser(
            'research',
            help='Execute, retry and inspect research runs'
        )

        research_subparsers = research_parser.add_subparsers(
            dest='subcommand',
            help='Research operations',
            metavar='{run,retry,history,show,stats}'
        )

        # Run subcommand
        run_parser = research_subparsers.add_parser('run', help='Execute a research run')
        run_parser.add_argument('--days', type=int, default=None, help='Days to look back from now or from --to (default: 7)')
        run_parser.add_argument('--from', dest='date_from', help='Window start (ISO date or timestamp)')
        run_parser.add_argument('--to', dest='date_to', help='Window end (ISO date or timestamp)')
        run_parser.add_argument('--sources', nargs='+', help='Source ids or names to use (default: all active)')
        run_parser.add_argument('--categories', nargs='+', help='Categories of interest')
        run_parser.add_argument('--keywords', nargs='+', help='Keywords passed to the fetchers')
        run_parser.add_argument('--min-relevance', type=float, default=None, help='Minimum relevance score (default: 30)')
        run_parser.add_argument('--max-topics', type=int, default=None, help='Maximum topics (default: 10)')
        run_parser.add_argument('--min-topics', type=int, default=None, help='Topics wanted before relaxing thresholds (default: 4)')
        run_parser.add_argument('--no-analysis', action='store_true', help='Skip UPSC analysis generation')
        run_parser.add_argument('--no-db', action='store_true', help='Do not write topics or analyses')
        run_parser.add_argument('--type', choices=[t.value for t in RunType if t != RunType.RETRY], default=None,
                                help='Run provenance (default: manual)')
        run_parser.add_argument('--json', action='store_true', help='Print the outcome as JSON')

        # Retry subcommand
        retry_parser = research_subparsers.add_parser('retry', help='Retry a finished research run')
        retry_parser.add_argument('run_id', help='Run to retry')
        retry_parser.add_argument('--json', action='store_true', help='Print the outcome as JSON')

        # History subcommand
        history_parser = research_subparsers.add_parser('history', help='List past research runs')
        history_parser.add_argument('--limit', type=int, default=10, help='Runs to show (default: 10)')
        history_parser.add_argument('--status', choices=RUN_STATUSES, help='Only runs with this status')
        history_parser.add_argument('--type', choices=[t.value for t in RunType], help='Only runs of this type')
        history_parser.add_argument('--sort-by', choices=RUN_SORT_FIELDS, default='created_at', help='Sort field')

        # Show subcommand
        show_parser = research_subparsers.add_parser('show', help='Show a research run with logs')
        show_parser.add_argument('run_id', help='Run to show')
        show_parser.add_argument('--json', action='store_true', help='Print the run document as JSON')

        # Stats subcommand
        research_subparsers.add_parser('stats', help='Show topic and run statistics')

    def _add_topics_parser(self, subparsers):
        """Add topics command parser."""
        topics_parser = subparsers.add_parser(
            'topics',
            help='Browse stored trending topics'
        )

        topics_subparsers = topics_parser.add_subparsers(
            dest='subcommand',
            help='Topic operations',
            metavar='{list,show,deactivate}'
        )

        list_parser = topics_subparsers.add_parser('list', help='List trending topics')
        list_parser.add_argument('--limit', type=int, default=20, help='Topics to show (default: 20)')
        list_parser.add_argument('--category', help='Only topics of this category')
        list_parser.add_argument('--min-relevance', type=float, default=0, help='Minimum relevance score')
        list_parser.add_argument('--sort-by', choices=TOPIC_SORT_FIELDS, default='relevance_score', help='Sort field')
        list_parser.add_argument('--all', action='store_true', help='Include deactivated topics')
        list_parser.add_argument('--json', action='store_true', help='Print topics as JSON')

        show_parser = topics_subparsers.add_parser('show', help='Show the analysis of a topic')
        show_parser.add_argument('topic_id', help='Topic id')
        show_parser.add_argument('--json', action='store_true', help='Print as JSON')

        deactivate_parser = topics_subparsers.add_parser('deactivate', help='Soft-delete a topic')
        deactivate_parser.add_argument('topic_id', help='Topic id')

    def _add_sources_parser(self, subparsers):
        """Add sources command parser."""
        sources_parser = subparsers.add_parser(
            'sources',
            help='News source management'
        )

        sources_subparsers = sources_parser.add_subparsers(
            dest='subcommand',
            help='Source operations',
            metavar='{list,seed}'
        )

        list_parser = sources_subparsers.add_parser('list', help='List configured sources')
        list_parser.add_argument('--active', action='store_true', help='Only active sources')

        sources_subparsers.add_parser('seed', help='Seed the default development sources')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Seed sources, then research the last 3 days
  python run.py sources seed
  python run.py research run --days 3

  # Narrow the run
  python run.py research run --keywords economy climate --max-topics 5 --no-analysis

  # Inspect results
  python run.py research history --status failed
  python run.py research show <run_id>
  python run.py research retry <run_id>
  python run.py topics list --category Economy
  python run.py topics show <topic_id>

Set STORAGE_BACKEND=postgres and DATABASE_URL to keep runs and topics between invocations.
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self.parser.parse_args([args.command, '--help'])
            return 1

        try:
            command = get_command(args.command, self.container)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        from research.config import get_config_manager
        get_config_manager().update_logging()
    except Exception as e:
        logger.error(f"Invalid configuration: {e}")
        return 22

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
