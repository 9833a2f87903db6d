import pytest

from research.config import ConfigManager, get_config, reset_config
from research.container import Container, _setup_default_services, get_container, reset_container
from research.database.memory import InMemoryRunStore, InMemoryTopicStore, InMemorySourceStore
from research.exceptions import ConfigurationError
from research.runs.controller import RunController

ENV_KEYS = [
    "STORAGE_BACKEND", "DATABASE_URL", "OPENAI_API_KEY", "OPENAI_MODEL", "NEWSAPI_KEY", "LOG_LEVEL",
    "SOURCE_DELAY_MS", "ANALYSIS_CONCURRENCY", "ANALYSIS_DELAY_MS", "RUN_MAX_RETRIES", "TIMEZONE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def build_config():
    manager = ConfigManager(env_file_path=".env.absent")
    return manager.get_config(force_reload=True)


def test_environment_defaults(clean_env):
    config = build_config()

    assert config.database.storage_backend == "memory"
    assert config.has_openai() is False
    assert config.app.source_delay_ms == 500
    assert config.app.analysis_concurrency == 2
    assert config.app.analysis_delay_ms == 2000
    assert config.app.run_max_retries == 3
    assert config.app.timezone == "Asia/Kolkata"


def test_environment_overrides(clean_env):
    clean_env.setenv("ANALYSIS_CONCURRENCY", "4")
    clean_env.setenv("RUN_MAX_RETRIES", "5")
    clean_env.setenv("NEWSAPI_KEY", "news-key")

    config = build_config()

    assert config.app.analysis_concurrency == 4
    assert config.app.run_max_retries == 5
    assert config.integrations.newsapi_key == "news-key"


@pytest.mark.parametrize("key,value", [
    ("STORAGE_BACKEND", "mongo"),
    ("STORAGE_BACKEND", "postgres"),
    ("ANALYSIS_CONCURRENCY", "0"),
    ("SOURCE_DELAY_MS", "soon"),
    ("LOG_LEVEL", "LOUD"),
])
def test_invalid_environment_is_rejected(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ConfigurationError):
        build_config()


def test_default_wiring_uses_memory_stores_without_openai(clean_env):
    container = Container()
    _setup_default_services(container)
    container.register_instance("config", build_config())

    controller = container.get("controller")

    assert isinstance(controller, RunController)
    assert container.get("openai_client") is None
    assert isinstance(container.get("run_store"), InMemoryRunStore)
    assert isinstance(container.get("topic_store"), InMemoryTopicStore)
    assert isinstance(container.get("source_store"), InMemorySourceStore)
    assert container.get("controller") is controller
    assert container.get("queries") is not container.get("queries")
    assert container.get("queries").run_store is controller.run_store


def test_container_lifecycle():
    container = Container()
    created = []
    container.register_singleton("thing", lambda: created.append(1) or object())

    first = container.get("thing")
    assert container.get("thing") is first
    container.reset_singleton("thing")
    assert container.get("thing") is not first
    assert len(created) == 2

    assert container.has("thing")
    container.clear()
    assert not container.has("thing")
    with pytest.raises(KeyError):
        container.get("thing")


def test_global_config_and_container_are_cached_until_reset(clean_env):
    reset_config()
    reset_container()
    try:
        config = get_config()
        container = get_container()

        assert get_config() is config
        assert get_container() is container
        assert container.has("controller") and container.has("queries")

        reset_config()
        reset_container()
        assert get_config() is not config
        assert get_container() is not container
    finally:
        reset_config()
        reset_container()
