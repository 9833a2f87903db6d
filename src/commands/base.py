#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from argparse import Namespace

from research.container import get_container
from research.exceptions import (
    ConfigurationError, ValidationError, RunNotFoundError, TopicNotFoundError,
    RunAlreadyRunningError, RetryLimitExceededError, DatabaseError
)

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Resolves the research services from the dependency injection container
    and maps failures to exit codes.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def controller(self):
        """Get run controller from container."""
        return self._container.get('controller')

    @property
    def queries(self):
        """Get query service from container."""
        return self._container.get('queries')

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Public methods of the command other than the base plumbing."""
        methods = []
        for attr_name in dir(self):
            if attr_name.startswith('_') or attr_name in ('execute', 'get_available_subcommands', 'handle_error',
                                                          'config', 'controller', 'queries', 'logger'):
                continue
            if callable(getattr(type(self), attr_name, None)):
                methods.append(attr_name)
        return methods

    def unknown_subcommand(self, subcommand: str) -> int:
        available = ", ".join(self.get_available_subcommands())
        self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
        return 1

    def handle_error(self, error: Exception, context: Optional[str] = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        # Expected precondition failures are reported without a traceback
        if isinstance(error, (RunNotFoundError, TopicNotFoundError)):
            self.logger.error(error_msg)
            return 2
        if isinstance(error, (RunAlreadyRunningError, RetryLimitExceededError)):
            self.logger.error(error_msg)
            return 3
        if isinstance(error, (ConfigurationError, ValidationError, ValueError)):
            self.logger.error(error_msg)
            return 22

        self.logger.error(error_msg, exc_info=True)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, DatabaseError):
            return 4
        else:
            return 1
