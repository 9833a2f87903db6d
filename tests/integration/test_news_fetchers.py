from datetime import datetime, timezone

import pytest
import requests

from research.exceptions import RateLimitExceededError, SourceConnectionError, SourceParseError
from research.models.research_config import resolve_research_config
from research.sources.collector import SourceCollector
from research.sources.newsapi import NewsAPIFetcher, DEFAULT_QUERY
from research.sources.rate_limiter import RateLimiterPool, TokenBucket
from research.sources.registry import build_default_registry
from research.sources.rss import TheHinduFetcher, strip_html

WINDOW_START = datetime(2024, 3, 10, tzinfo=timezone.utc)
WINDOW_END = datetime(2024, 3, 15, 23, 59, tzinfo=timezone.utc)

FEED_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>National</title>
    <item>
      <title>Cabinet approves &lt;b&gt;budget&lt;/b&gt; for railways</title>
      <link>https://www.thehindu.com/news/national/budget-railways</link>
      <description>&lt;p&gt;The Union Cabinet cleared the budget.&lt;/p&gt;</description>
      <pubDate>Wed, 13 Mar 2024 10:30:00 +0530</pubDate>
    </item>
    <item>
      <title>Monsoon forecast released</title>
      <link>https://www.thehindu.com/news/national/monsoon</link>
      <description>IMD expects a normal monsoon.</description>
      <pubDate>Thu, 14 Mar 2024 08:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Old budget story</title>
      <link>https://www.thehindu.com/news/national/old-budget</link>
      <description>Archived.</description>
      <pubDate>Mon, 01 Jan 2024 08:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for requests.Session, replaying queued responses."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, params=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "headers": headers,
                              "timeout": timeout})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def newsapi_source(source_factory, **overrides):
    fields = {"api_key": "secret", "fetch_config": {"retries": 2, "retry_delay": 0.5, "timeout": 12}}
    fields.update(overrides)
    return source_factory("NewsAPI.org", source_type="newsapi", **fields)


def test_newsapi_request_parameters(source_factory):
    session = FakeSession(FakeResponse(payload={"status": "ok", "articles": []}))
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=session, sleep=lambda s: None)

    fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END, ["budget", "gst"])
    fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    first, second = session.requests
    assert first["params"]["q"] == "budget OR gst"
    assert first["params"]["from"] == "2024-03-10"
    assert first["params"]["to"] == "2024-03-15"
    assert first["params"]["language"] == "en"
    assert first["params"]["sortBy"] == "relevancy"
    assert first["params"]["pageSize"] == "100"
    assert first["params"]["apiKey"] == "secret"
    assert first["timeout"] == 12
    assert second["params"]["q"] == DEFAULT_QUERY
    assert session.headers["User-Agent"]


def test_newsapi_parses_articles(source_factory):
    payload = {
        "status": "ok",
        "articles": [
            {
                "source": {"name": "The Economic Times"},
                "author": "Staff",
                "title": "RBI holds repo rate",
                "description": "Monetary policy committee keeps rates unchanged",
                "content": None,
                "url": "https://example.com/rbi",
                "publishedAt": "2024-03-14T06:30:00Z",
            },
            {"source": {}, "title": "Untitled source", "url": "https://example.com/x", "publishedAt": None},
        ],
    }
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=FakeSession(FakeResponse(payload=payload)))

    articles = fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    assert [article.title for article in articles] == ["RBI holds repo rate", "Untitled source"]
    assert articles[0].source == "The Economic Times"
    assert articles[0].published_at == datetime(2024, 3, 14, 6, 30, tzinfo=timezone.utc)
    assert articles[0].content == ""
    assert articles[1].source == "NewsAPI.org"
    assert articles[1].published_at is None


def test_newsapi_error_body_is_a_parse_error(source_factory):
    payload = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid"}
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=FakeSession(FakeResponse(payload=payload)),
                             sleep=lambda s: None)

    with pytest.raises(SourceParseError):
        fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)


def test_http_error_status_retries_then_raises(source_factory):
    sleeps = []
    session = FakeSession(FakeResponse(status_code=429))
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=session, sleep=sleeps.append)

    with pytest.raises(SourceConnectionError):
        fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    assert len(session.requests) == 2
    assert sleeps == [0.5]


def test_transient_failure_recovers(source_factory):
    session = FakeSession(requests.ConnectionError("reset"), FakeResponse(payload={"status": "ok", "articles": []}))
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=session, sleep=lambda s: None)

    assert fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END) == []
    assert len(session.requests) == 2


def test_retry_operation_backs_off_linearly(source_factory):
    sleeps = []
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=FakeSession(FakeResponse()), sleep=sleeps.append)
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise RuntimeError("not yet")
        return "done"

    assert fetcher.retry_operation(flaky, max_retries=3, delay=2.0) == "done"
    assert sleeps == [2.0, 4.0]


def test_requests_consult_the_rate_limiter(source_factory, fake_clock):
    bucket = TokenBucket(capacity=1, refill_per_second=1 / 10, clock=fake_clock, sleep=fake_clock.sleep)
    session = FakeSession(FakeResponse(payload={"status": "ok", "articles": []}))
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=session, rate_limiter=bucket)

    fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)
    fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    assert len(session.requests) == 2
    assert fake_clock.sleeps and sum(fake_clock.sleeps) == pytest.approx(10)


def test_wait_longer_than_timeout_is_refused_without_retrying(source_factory, fake_clock):
    bucket = TokenBucket(capacity=1, refill_per_second=1 / 3600, clock=fake_clock, sleep=fake_clock.sleep)
    session = FakeSession(FakeResponse(payload={"status": "ok", "articles": []}))
    sleeps = []
    fetcher = NewsAPIFetcher(newsapi_source(source_factory), session=session, rate_limiter=bucket,
                             sleep=sleeps.append)

    fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)
    with pytest.raises(RateLimitExceededError):
        fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    assert len(session.requests) == 1
    assert fake_clock.sleeps == []
    assert sleeps == []


def test_collector_skips_source_whose_budget_is_spent(source_store, source_factory, fake_clock):
    source_store.save(newsapi_source(source_factory, rate_limit={"requests": 1, "period_minutes": 60}))
    collector = SourceCollector(
        source_store,
        registry=build_default_registry(),
        limiter_pool=RateLimiterPool(clock=fake_clock, sleep=fake_clock.sleep),
        delay_ms=0,
        sleep=fake_clock.sleep,
        session=FakeSession(FakeResponse(payload={"status": "ok", "articles": []})),
    )
    config = resolve_research_config({})

    first = collector.collect(config)
    second = collector.collect(config)

    assert [outcome.status for outcome in first.outcomes] == ["fetched"]
    assert [outcome.status for outcome in second.outcomes] == ["skipped"]
    assert "Rate limit exceeded for NewsAPI.org" in second.failures[0].error
    assert fake_clock.sleeps == []
    stored = source_store.get_by_name("NewsAPI.org")
    assert stored.success_count == 1
    assert stored.error_count == 0


def test_rss_fetcher_parses_filters_and_cleans(source_factory):
    source = source_factory("The Hindu", source_type="thehindu")
    session = FakeSession(FakeResponse(content=FEED_XML))
    fetcher = TheHinduFetcher(source, session=session, sleep=lambda s: None)

    articles = fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END, ["budget"])

    assert len(session.requests) == len(TheHinduFetcher.FEED_URLS)
    assert session.requests[0]["url"] == TheHinduFetcher.FEED_URLS[0]
    # both national and international feeds replay the same body
    assert {article.url for article in articles} == {"https://www.thehindu.com/news/national/budget-railways"}
    article = articles[0]
    assert article.title == "Cabinet approves budget for railways"
    assert article.description == "The Union Cabinet cleared the budget."
    assert article.source == "The Hindu"
    assert article.published_at.utcoffset().total_seconds() == 5.5 * 3600
    assert article.published_at.hour == 10


def test_rss_without_keywords_keeps_everything_in_window(source_factory):
    fetcher = TheHinduFetcher(source_factory("The Hindu", source_type="thehindu"),
                              session=FakeSession(FakeResponse(content=FEED_XML)))

    articles = fetcher.fetch_current_affairs(WINDOW_START, WINDOW_END)

    assert "https://www.thehindu.com/news/national/old-budget" not in {article.url for article in articles}
    assert len(articles) == 4


def test_unparseable_feed_is_a_parse_error(source_factory):
    fetcher = TheHinduFetcher(source_factory("The Hindu", source_type="thehindu"),
                              session=FakeSession(FakeResponse(content=b"<<<not a feed")),
                              sleep=lambda s: None)

    with pytest.raises(SourceParseError):
        fetcher.fetch_feed("https://example.com/feed")


def test_strip_html():
    assert strip_html("<p>Hello <b>world</b></p>") == "Hello world"
    assert strip_html(None) == ""


def test_default_registry_covers_builtin_types(source_factory):
    registry = build_default_registry()

    assert set(registry.list_source_types()) == {"newsapi", "thehindu", "pib", "indianexpress"}
    fetcher = registry.create_fetcher(newsapi_source(source_factory), session=FakeSession(FakeResponse()))
    assert isinstance(fetcher, NewsAPIFetcher)
    with pytest.raises(KeyError):
        registry.create_fetcher(source_factory("Mystery", source_type="carrier-pigeon"))
