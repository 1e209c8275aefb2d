import queue
import unittest

from babaclient.events import ConnectionClosed, ConnectionErrored, ConnectionOpened, MessageReceived
from babaclient.net.connection import ConnectionManager, ConnectionState, build_endpoint
from babaclient.net.protocol import Command, ErrorFrame, GridFrame
from babaclient.status import Severity, StatusReporter
from tests.fakes import FakeRenderer, FakeWebSocket, collect, grid_json, refuse


class TestEndpoint(unittest.TestCase):
    def test_scheme_follows_server(self) -> None:
        self.assertEqual(build_endpoint("http://localhost:8080"), "ws://localhost:8080/game-ws")
        self.assertEqual(build_endpoint("https://baba.example.org"), "wss://baba.example.org/game-ws")
        self.assertEqual(build_endpoint("https://baba.example.org:8443/play/"), "wss://baba.example.org:8443/game-ws")

    def test_bare_host(self) -> None:
        self.assertEqual(build_endpoint("10.0.0.5:8080"), "ws://10.0.0.5:8080/game-ws")


class ConnectionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.channel: "queue.Queue" = queue.Queue()
        self.status = StatusReporter()
        self.renderer = FakeRenderer()
        self.ws = FakeWebSocket()

    def make(self, connector=None) -> ConnectionManager:
        return ConnectionManager("ws://test/game-ws", self.channel.put, self.renderer, self.status,
                                 connector or (lambda endpoint: self.ws))

    def opened(self) -> ConnectionManager:
        conn = self.make()
        conn.connect()
        conn.thread.join(timeout=5)
        for event in collect(self.channel):
            if isinstance(event, ConnectionOpened):
                conn.dispatch(event)
        self.assertIs(conn.state, ConnectionState.OPEN)
        return conn


class TestLifecycle(ConnectionTestCase):
    def test_reader_posts_events_in_order(self) -> None:
        self.ws.inbox = ['{"error":"x"}', "[]"]
        conn = self.make()
        conn.connect()
        self.assertIs(conn.state, ConnectionState.CONNECTING)
        conn.thread.join(timeout=5)
        events = collect(self.channel)
        self.assertEqual(events, [
            ConnectionOpened(),
            MessageReceived('{"error":"x"}'),
            MessageReceived("[]"),
            ConnectionClosed(1000, "bye"),
        ])

    def test_failed_handshake_posts_error(self) -> None:
        conn = self.make(connector=refuse)
        conn.connect()
        conn.thread.join(timeout=5)
        events = collect(self.channel)
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0], ConnectionErrored)
        conn.dispatch(events[0])
        self.assertIs(conn.state, ConnectionState.ERRORED)
        self.assertEqual(self.status.current.severity, Severity.FATAL)

    def test_unexpected_connector_failure_posts_error(self) -> None:
        def connector(endpoint):
            raise RuntimeError("no transport")

        conn = self.make(connector)
        conn.connect()
        conn.thread.join(timeout=5)
        events = collect(self.channel)
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0].error, RuntimeError)
        conn.dispatch(events[0])
        self.assertIs(conn.state, ConnectionState.ERRORED)

    def test_unexpected_reader_failure_posts_error(self) -> None:
        class BrokenWebSocket(FakeWebSocket):
            def recv(self):
                raise ValueError("garbled frame")

        self.ws = BrokenWebSocket()
        conn = self.make()
        conn.connect()
        conn.thread.join(timeout=5)
        self.assertFalse(conn.thread.is_alive())
        events = collect(self.channel)
        self.assertEqual(events[0], ConnectionOpened())
        self.assertIsInstance(events[1], ConnectionErrored)
        self.assertIsInstance(events[1].error, ValueError)
        for event in events:
            conn.dispatch(event)
        self.assertIs(conn.state, ConnectionState.ERRORED)
        self.assertEqual(self.status.current.severity, Severity.FATAL)

    def test_connect_only_once(self) -> None:
        calls = []

        def connector(endpoint):
            calls.append(endpoint)
            return self.ws

        conn = self.make(connector)
        conn.connect()
        conn.thread.join(timeout=5)
        conn.connect()
        self.assertEqual(calls, ["ws://test/game-ws"])

    def test_close_is_final(self) -> None:
        conn = self.opened()
        conn.dispatch(ConnectionClosed(1001, "going away"))
        self.assertIs(conn.state, ConnectionState.CLOSED)
        self.assertIn("1001", self.status.current.text)
        self.assertIn("going away", self.status.current.text)

        conn.dispatch(ConnectionOpened())
        self.assertIs(conn.state, ConnectionState.CLOSED)
        conn.dispatch(ConnectionErrored(OSError("late")))
        self.assertIs(conn.state, ConnectionState.CLOSED)

    def test_error_then_close_keeps_errored(self) -> None:
        conn = self.opened()
        conn.dispatch(ConnectionErrored(OSError("reset")))
        self.assertIs(conn.state, ConnectionState.ERRORED)
        self.assertTrue(self.ws.closed)
        conn.dispatch(ConnectionClosed(1006, ""))
        self.assertIs(conn.state, ConnectionState.ERRORED)
        self.assertIn("1006", self.status.current.text)
        self.assertFalse(conn.send(Command.UP))


class TestMessages(ConnectionTestCase):
    def test_grid_goes_to_renderer(self) -> None:
        conn = self.opened()
        status_before = self.status.current
        frame = conn.on_message(grid_json([[["ENTITY_BABA"], ["EMPTY"]]]))
        self.assertIsInstance(frame, GridFrame)
        self.assertEqual(len(self.renderer.grids), 1)
        self.assertIs(self.status.current, status_before)

    def test_error_frame_skips_renderer(self) -> None:
        conn = self.opened()
        frame = conn.on_message('{"error":"Invalid move"}')
        self.assertEqual(frame, ErrorFrame("Invalid move"))
        self.assertEqual(self.renderer.grids, [])
        self.assertEqual(self.status.current.severity, Severity.WARNING)
        self.assertIn("Invalid move", self.status.current.text)

    def test_malformed_frame_dropped(self) -> None:
        conn = self.opened()
        for raw in ("{not json", "{}"):
            self.assertIsNone(conn.on_message(raw))
        self.assertEqual(self.renderer.grids, [])
        self.assertEqual(self.status.current.severity, Severity.WARNING)
        self.assertIs(conn.state, ConnectionState.OPEN)

    def test_deeply_nested_frame_is_dropped(self) -> None:
        conn = self.opened()
        self.assertIsNone(conn.on_message("[" * 200000 + "]" * 200000))
        self.assertEqual(self.renderer.grids, [])
        self.assertEqual(self.status.current.severity, Severity.WARNING)
        self.assertIs(conn.state, ConnectionState.OPEN)
        self.assertIsInstance(conn.on_message("[]"), GridFrame)

    def test_frames_ignored_unless_open(self) -> None:
        conn = self.make()
        self.assertIsNone(conn.on_message("[]"))
        self.assertEqual(self.renderer.grids, [])


class TestSend(ConnectionTestCase):
    def test_nothing_sent_before_open(self) -> None:
        conn = self.make()
        self.assertFalse(conn.send(Command.UP))
        conn.connect()
        conn.thread.join(timeout=5)
        self.assertFalse(conn.send(Command.UP))
        self.assertEqual(self.ws.sent, [])

    def test_sends_literal_when_open(self) -> None:
        conn = self.opened()
        self.assertTrue(conn.send(Command.RESTART))
        self.assertEqual(self.ws.sent, ["RESTART"])

    def test_nothing_sent_after_close(self) -> None:
        conn = self.opened()
        conn.dispatch(ConnectionClosed(1000, ""))
        self.assertFalse(conn.send(Command.LEFT))
        self.assertEqual(self.ws.sent, [])


if __name__ == "__main__":
    unittest.main()
