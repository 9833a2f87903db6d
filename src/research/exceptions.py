#!/usr/bin/env python3
"""
Standardized exception hierarchy for the research engine.

Provides specific exception types for different error conditions with
proper error context.
"""

from typing import Optional, Dict, Any


class ResearchEngineError(Exception):
    """Base exception for all research engine errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Source-related exceptions
class SourceError(ResearchEngineError):
    """Base exception for news source errors."""
    pass


class SourceConnectionError(SourceError):
    """Failed to connect to news source."""

    def __init__(self, source_name: str, url: str, original_error: Exception):
        message = f"Failed to connect to {source_name} at {url}"
        context = {
            'source_name': source_name,
            'url': url,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class SourceParseError(SourceError):
    """Failed to parse content from news source."""

    def __init__(self, source_name: str, parse_stage: str, original_error: Exception):
        message = f"Failed to parse {parse_stage} from {source_name}"
        context = {
            'source_name': source_name,
            'parse_stage': parse_stage,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class RateLimitExceededError(SourceError):
    """Source rate limit budget is exhausted."""

    def __init__(self, source_name: str, retry_after_seconds: float):
        message = f"Rate limit exceeded for {source_name}. Wait {retry_after_seconds:.0f} seconds."
        context = {
            'source_name': source_name,
            'retry_after_seconds': retry_after_seconds
        }
        super().__init__(message, context=context)


class NoArticlesFetchedError(ResearchEngineError):
    """No source produced any article for the run."""

    def __init__(self):
        super().__init__("No articles fetched from any source")


# Run-related exceptions
class RunError(ResearchEngineError):
    """Base exception for research run errors."""
    pass


class RunNotFoundError(RunError):
    """Research run does not exist."""

    def __init__(self, run_id: str):
        super().__init__("Research run not found", context={'run_id': run_id})


class RunAlreadyRunningError(RunError):
    """Research run is still executing."""

    def __init__(self, run_id: str):
        super().__init__("Research run is already running", context={'run_id': run_id})


class RetryLimitExceededError(RunError):
    """Research run used up its retry budget."""

    def __init__(self, run_id: str, retry_count: int, max_retries: int):
        message = "Maximum retry attempts exceeded"
        context = {
            'run_id': run_id,
            'retry_count': retry_count,
            'max_retries': max_retries
        }
        super().__init__(message, context=context)


class InvalidRunTransitionError(RunError):
    """A run mutation would break the run lifecycle rules."""

    def __init__(self, run_id: str, issue: str):
        super().__init__(f"Invalid transition for run {run_id}: {issue}", context={'run_id': run_id, 'issue': issue})


# Topic-related exceptions
class TopicNotFoundError(ResearchEngineError):
    """Trending topic does not exist."""

    def __init__(self, topic_id: str):
        super().__init__("Topic not found", context={'topic_id': topic_id})


# Database-related exceptions
class DatabaseError(ResearchEngineError):
    """Base exception for database errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to connect to database."""

    def __init__(self, connection_type: str, original_error: Exception):
        message = f"Failed to connect to database via {connection_type}"
        context = {
            'connection_type': connection_type,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class DatabaseOperationError(DatabaseError):
    """Database operation failed."""

    def __init__(self, operation: str, table: str, original_error: Exception):
        message = f"Database {operation} failed on table {table}"
        context = {
            'operation': operation,
            'table': table,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Analysis-related exceptions
class AnalysisError(ResearchEngineError):
    """Base exception for analysis errors."""
    pass


class AnalysisValidationError(AnalysisError):
    """Generated analysis is missing required sections."""

    def __init__(self, missing_fields: list):
        message = f"Missing required fields in analysis: {', '.join(missing_fields)}"
        super().__init__(message, context={'missing_fields': missing_fields})


class LLMError(AnalysisError):
    """LLM/AI analysis error."""

    def __init__(self, provider: str, model: str, original_error: Exception):
        message = f"LLM error from {provider} ({model}): {original_error}"
        context = {
            'provider': provider,
            'model': model,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Configuration-related exceptions
class ConfigurationError(ResearchEngineError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)


class ValidationError(ResearchEngineError):
    """Data validation failed."""

    def __init__(self, field: str, issue: str):
        message = f"Validation failed for {field}: {issue}"
        super().__init__(message, context={'field': field, 'issue': issue})
