import io
import asyncio

from devhost.local.console import ConsoleRelay
from devhost.local.router import MessageRouter


def test_valid_line_is_sent_verbatim(channel) -> None:
    relay = ConsoleRelay(channel, err=io.StringIO())
    assert relay.handle_line('{"type":"action","payload":{"id":"preset_recall","preset":3}}\n') is True
    assert channel.sent == [{"type": "action", "payload": {"id": "preset_recall", "preset": 3}}]


def test_non_object_json_is_sent(channel) -> None:
    relay = ConsoleRelay(channel, err=io.StringIO())
    relay.handle_line("[1, 2]")
    relay.handle_line('"text"')
    assert channel.sent == [[1, 2], "text"]


def test_blank_lines_are_ignored(channel) -> None:
    err = io.StringIO()
    relay = ConsoleRelay(channel, err=err)
    for line in ("", "\n", "   \t \n"):
        assert relay.handle_line(line) is False
    assert channel.sent == []
    assert err.getvalue() == ""


def test_invalid_json_is_reported_and_next_line_processed(channel) -> None:
    err = io.StringIO()
    relay = ConsoleRelay(channel, err=err)

    assert relay.handle_line("not json") is False
    assert channel.sent == []
    assert "[REPL] Invalid JSON" in err.getvalue()

    assert relay.handle_line('{"type":"ping"}') is True
    assert channel.sent == [{"type": "ping"}]


def test_send_refused_when_disconnected(channel) -> None:
    channel.connected = False
    relay = ConsoleRelay(channel, err=io.StringIO())
    assert relay.handle_line('{"type":"ping"}') is False


def test_run_relays_until_end_of_input(channel) -> None:
    err = io.StringIO()
    stream = io.StringIO('{"type":"ping"}\n\nnot json\n{"type":"x","n":1}\n')
    relay = ConsoleRelay(channel, stream=stream, err=err)

    asyncio.run(asyncio.wait_for(relay.run(), timeout=5))

    assert channel.sent == [{"type": "ping"}, {"type": "x", "n": 1}]
    assert err.getvalue().count("[REPL] Invalid JSON") == 1


def test_operator_ping_round_trip_produces_one_pong(channel) -> None:
    # The operator's ping goes out verbatim; the module's ping back is answered once.
    relay = ConsoleRelay(channel, err=io.StringIO())
    router = MessageRouter(channel)
    relay.handle_line('{"type":"ping"}')
    router.dispatch(channel.sent[-1])
    assert channel.sent == [{"type": "ping"}, {"type": "pong"}]


def test_banner_shows_example(channel, capsys) -> None:
    ConsoleRelay(channel).print_banner()
    out = capsys.readouterr().out
    assert '{"type":"action","payload":{"id":"preset_recall","preset":3}}' in out


def test_too_deeply_nested_line_is_reported_and_relay_continues(channel) -> None:
    err = io.StringIO()
    stream = io.StringIO("[" * 200000 + "]" * 200000 + '\n{"type":"ping"}\n')
    relay = ConsoleRelay(channel, stream=stream, err=err)

    asyncio.run(asyncio.wait_for(relay.run(), timeout=5))

    assert channel.sent == [{"type": "ping"}]
    assert "[REPL] Invalid JSON" in err.getvalue()
