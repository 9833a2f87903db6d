#!/usr/bin/env python3
"""
Dependency Injection Container

Provides a centralized way to wire stores, the OpenAI client and the research
services from configuration. Supports singleton and factory registrations.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            factory._is_singleton = True
            self._factories[service_name] = factory
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service as factory (new instance each time)."""
        with self._lock:
            self._factories[service_name] = factory

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance, replacing any factory of that name."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        # Reentrant: factories resolve their own dependencies through get()
        with self._lock:
            factory = self._factories[service_name]

            if getattr(factory, '_is_singleton', False):
                if service_name not in self._singletons:
                    self._singletons[service_name] = factory()
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

            instance = factory()
            logger.debug(f"Created new instance for '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        with self._lock:
            self._factories.clear()
            self._singletons.clear()

    def reset_singleton(self, service_name: str) -> None:
        """Reset a singleton instance (will be recreated on next get())."""
        with self._lock:
            if self._singletons.pop(service_name, None) is not None:
                logger.debug(f"Reset singleton '{service_name}'")


_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    def create_config():
        from .config import get_config
        return get_config()

    def create_connection_manager():
        from .database.connection_manager import ConnectionManager
        return ConnectionManager(container.get('config').database)

    def create_run_store():
        if container.get('config').uses_postgres():
            from .database.run_service import RunService
            return RunService(container.get('connection_manager'))
        from .database.memory import InMemoryRunStore
        return InMemoryRunStore()

    def create_topic_store():
        if container.get('config').uses_postgres():
            from .database.topic_service import TopicService
            return TopicService(container.get('connection_manager'))
        from .database.memory import InMemoryTopicStore
        return InMemoryTopicStore()

    def create_source_store():
        if container.get('config').uses_postgres():
            from .database.source_service import SourceService
            return SourceService(container.get('connection_manager'))
        from .database.memory import InMemorySourceStore
        return InMemorySourceStore()

    def create_openai_client():
        config = container.get('config')
        if not config.has_openai():
            logger.info("OpenAI API key not configured, using fallback scoring and analyses")
            return None
        from integrations.openai_client import OpenAIClient
        return OpenAIClient(api_key=config.integrations.openai_api_key,
                            model=config.integrations.openai_model)

    def create_detector():
        from .trending.detector import TrendingDetector
        return TrendingDetector(topic_store=container.get('topic_store'),
                                llm_client=container.get('openai_client'))

    def create_generator():
        from .analysis.generator import AnalysisGenerator
        return AnalysisGenerator(llm_client=container.get('openai_client'))

    def create_collector():
        from .sources.collector import SourceCollector
        app = container.get('config').app
        return SourceCollector(
            container.get('source_store'),
            delay_ms=app.source_delay_ms,
            user_agent=app.feed_user_agent,
            timezone=app.timezone
        )

    def create_controller():
        from .runs.controller import RunController
        app = container.get('config').app
        return RunController(
            run_store=container.get('run_store'),
            topic_store=container.get('topic_store'),
            collector=container.get('collector'),
            detector=container.get('detector'),
            generator=container.get('generator'),
            analysis_concurrency=app.analysis_concurrency,
            analysis_delay_ms=app.analysis_delay_ms,
            max_retries=app.run_max_retries
        )

    def create_queries():
        from .runs.queries import ResearchQueries
        return ResearchQueries(container.get('run_store'), container.get('topic_store'),
                               container.get('source_store'))

    container.register_singleton('config', create_config)
    container.register_singleton('connection_manager', create_connection_manager)
    container.register_singleton('run_store', create_run_store)
    container.register_singleton('topic_store', create_topic_store)
    container.register_singleton('source_store', create_source_store)
    container.register_singleton('openai_client', create_openai_client)
    container.register_singleton('detector', create_detector)
    container.register_singleton('generator', create_generator)
    container.register_singleton('collector', create_collector)
    container.register_singleton('controller', create_controller)
    container.register_factory('queries', create_queries)

    logger.debug("Default services registered in container")
