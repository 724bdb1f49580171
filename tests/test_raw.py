import io

from conftest import PARSE_ERROR_REPLY, ScriptedConnection, reply
from witnet_cli.errors import EXIT_OK, EXIT_TRANSPORT
from witnet_cli.raw import RawMultiplexer, byte_preserving, input_lines, run_raw_session


def test_lines_are_sent_unmodified_and_replies_printed_verbatim():
    connection = ScriptedConnection([PARSE_ERROR_REPLY, reply(1, True)])
    output = io.StringIO()
    request = '{"jsonrpc":"2.0","method":"syncStatus","id":1}'

    code = RawMultiplexer(connection, output).run(["hi", request])

    assert code == EXIT_OK
    assert connection.sent == ["hi", request]
    assert output.getvalue().splitlines() == [PARSE_ERROR_REPLY, reply(1, True)]


def test_end_of_input_without_lines_exits_cleanly():
    connection = ScriptedConnection([])
    assert RawMultiplexer(connection, io.StringIO()).run([]) == EXIT_OK
    assert connection.sent == []


def test_connection_drop_while_waiting_is_fatal(caplog):
    connection = ScriptedConnection([reply(1, True)])
    output = io.StringIO()

    code = RawMultiplexer(connection, output).run(["first", "second", "third"])

    assert code == EXIT_TRANSPORT
    assert connection.sent == ["first", "second"]
    assert output.getvalue().splitlines() == [reply(1, True)]
    assert any(record.levelname == "ERROR" for record in caplog.records)


def test_input_lines_strips_terminators_and_prompts():
    prompts = io.StringIO()
    lines = list(input_lines(io.StringIO("a\r\nb\n\nc"), prompt="> ", output=prompts))
    assert lines == ["a", "b", "", "c"]
    assert prompts.getvalue() == "> " * 5


def test_invalid_utf8_input_is_read_as_surrogates():
    stream = byte_preserving(io.TextIOWrapper(io.BytesIO(b"\xff ok\n"), encoding="utf-8"))
    assert list(input_lines(stream)) == ["\udcff ok"]


def test_redirected_input_has_no_prompt():
    connection = ScriptedConnection([PARSE_ERROR_REPLY])
    output = io.StringIO()
    assert run_raw_session(connection, io.StringIO("hi\n"), output) == EXIT_OK
    assert output.getvalue() == PARSE_ERROR_REPLY + "\n"
