"""
Integration tests: Producer, worker pool and completion barrier (run_pipeline).
"""

import asyncio
import dataclasses
import io
from collections import Counter

import httpx
import orjson
import pytest

from url_status.config import Config
from url_status.pipeline import default_reporter, run_pipeline
from url_status.reporting import JsonLinesReporter, log_outcome
from tests.conftest import DEAD_URL, FLAKY_URL, OK_URL, FakeWeb, scenario_web


def _run(lines, config, web, report=None):
    reported = []
    sink = report if report is not None else reported.append
    results, metrics = asyncio.run(
        run_pipeline(lines, config, report=sink, transport=web.transport())
    )
    return results, metrics, reported


class TestScenario:
    """Two workers, two retries, ok / flaky / dead endpoints."""

    def test_expected_outcomes(self, fast_config):
        web = scenario_web()
        results, metrics, reported = _run([OK_URL, FLAKY_URL, DEAD_URL], fast_config, web)

        by_url = {o.url: o for o in results}
        assert by_url[OK_URL].kind == "ok" and by_url[OK_URL].status_code == 200
        assert by_url[FLAKY_URL].kind == "ok" and by_url[FLAKY_URL].status_code == 200
        assert by_url[FLAKY_URL].attempts == 3
        assert by_url[DEAD_URL].kind == "failed"
        assert by_url[DEAD_URL].attempts == 3

        assert web.calls == Counter({"ok.example": 1, "flaky.example": 3, "dead.example": 3})
        assert metrics.urls_ok == 2
        assert metrics.urls_failed == 1
        assert metrics.retries_total == 4
        assert reported == results


class TestExactlyOnce:
    """Every enqueued URL is reported exactly once, whatever the pool size."""

    @pytest.mark.parametrize("workers", [1, 2, 8, 32])
    def test_each_url_reported_once(self, fast_config, workers):
        urls = [f"https://ok.example/page/{i}" for i in range(50)]
        urls += [f"https://dead{i}.example/" for i in range(5)]
        config = dataclasses.replace(fast_config, concurrency=workers)
        web = FakeWeb(always={"ok.example": 200})

        results, metrics, _ = _run(urls, config, web)

        assert sorted(o.url for o in results) == sorted(urls)
        assert len(results) == len(urls)
        assert metrics.urls_total == len(urls)

    def test_more_workers_than_urls(self, fast_config):
        config = dataclasses.replace(fast_config, concurrency=16)
        results, _, _ = _run([OK_URL], config, scenario_web())
        assert [o.url for o in results] == [OK_URL]

    def test_empty_input_completes(self, fast_config):
        results, metrics, _ = _run([], fast_config, scenario_web())
        assert results == []
        assert metrics.urls_total == 0

    def test_invalid_lines_never_reach_workers(self, fast_config):
        web = scenario_web()
        results, metrics, _ = _run(["nonsense", "", OK_URL], fast_config, web)
        assert [o.url for o in results] == [OK_URL]
        assert metrics.urls_rejected == 1
        assert sum(web.calls.values()) == 1


class TestIndependence:
    """A permanently failing URL does not hold back the others."""

    def test_dead_url_does_not_block_healthy_ones(self):
        config = Config(concurrency=2, timeout=1.0, retries=3, retry_sleep=0.05)
        web = FakeWeb(always={"ok.example": 200})
        urls = [DEAD_URL] + [f"https://ok.example/{i}" for i in range(5)]

        results, _, _ = _run(urls, config, web)

        assert results[-1].url == DEAD_URL
        assert all(o.kind == "ok" for o in results[:-1])


class TestDrain:
    """The call returns only once every queued URL has an outcome."""

    def test_slow_responses_are_waited_for(self, fast_config):
        async def handler(request):
            await asyncio.sleep(0.02)
            return httpx.Response(200)

        class SlowWeb:
            def transport(self):
                return httpx.MockTransport(handler)

        urls = [f"https://slow.example/{i}" for i in range(10)]
        results, _, _ = _run(urls, fast_config, SlowWeb())
        assert len(results) == 10

    def test_producer_failure_drains_then_raises(self, fast_config):
        async def lines():
            yield OK_URL
            yield FLAKY_URL
            raise RuntimeError("producer bug")

        reported = []
        with pytest.raises(RuntimeError):
            asyncio.run(run_pipeline(
                lines(), fast_config, report=reported.append,
                transport=scenario_web().transport(),
            ))
        assert sorted(o.url for o in reported) == sorted([OK_URL, FLAKY_URL])


class TestReporting:
    """Outcome sinks."""

    def test_default_reporter_follows_output_mode(self):
        assert default_reporter(Config(output="log")) is log_outcome
        assert isinstance(default_reporter(Config(output="json")), JsonLinesReporter)

    def test_json_lines_reporter(self, fast_config):
        buf = io.BytesIO()
        _run([OK_URL, DEAD_URL], fast_config, scenario_web(), report=JsonLinesReporter(buf))

        rows = [orjson.loads(line) for line in buf.getvalue().splitlines()]
        by_url = {r["url"]: r for r in rows}
        assert by_url[OK_URL]["status_code"] == 200
        assert by_url[OK_URL]["kind"] == "ok"
        assert by_url[DEAD_URL]["kind"] == "failed"
        assert by_url[DEAD_URL]["attempts"] == 3

    def test_log_reporter_emits_one_line_per_outcome(self, fast_config, caplog):
        with caplog.at_level("INFO", logger="url_status.reporting"):
            _run([OK_URL, DEAD_URL], fast_config, scenario_web(), report=log_outcome)
        messages = [r.message for r in caplog.records if r.name == "url_status.reporting"]
        assert messages.count(f"Response status: 200, URL: {OK_URL}") == 1
        assert sum(m.startswith("Request failed:") for m in messages) == 1

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            asyncio.run(run_pipeline([OK_URL], Config(concurrency=0)))
