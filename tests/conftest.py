import json
import socketserver
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest

from witnet_cli.errors import TransportClosed

PARSE_ERROR_REPLY = '{"jsonrpc":"2.0","error":{"code":-32700,"message":"Parse error"},"id":null}'


class ScriptedConnection:
    """In-memory connection replaying canned reply lines."""

    def __init__(self, replies: Iterable[str] = (), address: str = "stub:0") -> None:
        self.address = address
        self.sent: List[str] = []
        self._replies = list(replies)
        self.closed = False

    def send(self, line: str) -> None:
        self.sent.append(line)

    def receive_line(self) -> str:
        if not self._replies:
            raise TransportClosed("connection closed by stub")
        return self._replies.pop(0)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def sent_requests(self) -> List[Dict[str, Any]]:
        return [json.loads(line) for line in self.sent]


def reply(request_id: Any, result: Any) -> str:
    return json.dumps({"jsonrpc": "2.0", "result": result, "id": request_id})


def error_reply(request_id: Any, code: int, message: str) -> str:
    return json.dumps(
        {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}
    )


def json_rpc_responder(results: Dict[str, Any]) -> Callable[[str], Optional[str]]:
    """Answer requests by method name the way a JSON-RPC node would."""

    def respond(line: str) -> Optional[str]:
        try:
            request = json.loads(line)
        except ValueError:
            return PARSE_ERROR_REPLY
        if not isinstance(request, dict) or "method" not in request:
            return error_reply(None, -32600, "Invalid request")
        method = request["method"]
        if method not in results:
            return error_reply(request.get("id"), -32601, "Method not found")
        result = results[method]
        if callable(result):
            result = result(request.get("params", []))
        return reply(request.get("id"), result)

    return respond


class _LineHandler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        node = self.server.node
        for raw in self.rfile:
            node.received_raw.append(raw.rstrip(b"\r\n"))
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            node.received.append(line)
            answer = node.respond(line)
            if answer is None:
                return
            self.wfile.write(answer.encode("utf-8") + b"\n")
            self.wfile.flush()


class _NodeServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True


class FakeNode:
    """Threaded line-oriented JSON-RPC server bound to an ephemeral port."""

    def __init__(self, respond: Callable[[str], Optional[str]]) -> None:
        self.respond = respond
        self.received: List[str] = []
        self.received_raw: List[bytes] = []
        self._server = _NodeServer(("127.0.0.1", 0), _LineHandler)
        self._server.node = self
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def address(self) -> str:
        host, port = self._server.server_address[:2]
        return f"{host}:{port}"

    @property
    def received_requests(self) -> List[Dict[str, Any]]:
        return [json.loads(line) for line in self.received]

    def start(self) -> "FakeNode":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture
def fake_node():
    nodes: List[FakeNode] = []

    def _start(respond: Callable[[str], Optional[str]]) -> FakeNode:
        node = FakeNode(respond).start()
        nodes.append(node)
        return node

    yield _start
    for node in nodes:
        node.stop()


@pytest.fixture
def refused_address() -> str:
    import socket

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    for name in (
        "WITNET_NODE_ADDRESS",
        "WITNET_NODE_HOST",
        "WITNET_NODE_PORT",
        "WITNET_NODE_USE_HTTPS",
        "WITNET_NODE_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("witnet_cli.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
