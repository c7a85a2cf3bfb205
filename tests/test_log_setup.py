import logging
from unittest import mock

from devhost.log.handler import LokiHandler
from devhost.log.setup import MainFormatter


def _record(name: str, message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_module_records_are_printed_raw() -> None:
    formatter = MainFormatter()
    assert formatter.format(_record("module", "[module-log:info] hi")) == "[module-log:info] hi"


def test_supervisor_records_are_decorated() -> None:
    line = MainFormatter().format(_record("devhost.local.router.router", "module READY: up", logging.WARNING))
    assert "WARNING" in line
    assert "[devhost.local.router.router] - module READY: up" in line


def test_loki_labels() -> None:
    handler = LokiHandler("http://loki:3100/", org_id="tenant", connection_id="devhost-1-a", start_thread=False)
    labels = handler.labels_for(_record("devhost", "hello"))
    assert handler.push_url == "http://loki:3100/loki/api/v1/push"
    assert handler.session.headers["X-Scope-OrgID"] == "tenant"
    assert labels["job"] == "devhost"
    assert labels["connection"] == "devhost-1-a"
    assert labels["level"] == "info"
    assert labels["logger"] == "devhost"


def test_loki_flush_groups_lines_by_stream(monkeypatch) -> None:
    handler = LokiHandler("http://loki:3100", start_thread=False)
    post = mock.Mock(return_value=mock.Mock(status_code=204))
    monkeypatch.setattr(handler.session, "post", post)

    handler.emit(_record("devhost", "one"))
    handler.emit(_record("module", "relayed"))
    handler.emit(_record("devhost", "two"))
    handler.flush()
    handler.flush()

    post.assert_called_once()
    streams = post.call_args.kwargs["json"]["streams"]
    by_logger = {s["stream"]["logger"]: [v[1] for v in s["values"]] for s in streams}
    assert by_logger == {"devhost": ["one", "two"], "module": ["relayed"]}
