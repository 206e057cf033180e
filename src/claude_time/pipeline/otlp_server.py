"""Loopback OTLP/HTTP receiver: pure data source, no display logic.

Accepts one HTTP request per connection on 127.0.0.1, hands OTLP/JSON metric
exports to the decoder and the decoded batch to an observer callback, and
answers every request with the same fixed 200 response.

All connections are served by one asyncio event loop. Decode and the observer
callback run synchronously on that loop, so batches from different
connections are applied one after another, never interleaved.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from claude_time.pipeline.event_types import HTTPRequest, MetricDataPoint
from claude_time.pipeline.http_framer import HTTPRequestFramer
from claude_time.pipeline.otlp_decoder import decode_metrics

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"
DEFAULT_PORT = 4318  # OTLP HTTP exporter convention
METRICS_PATH = "/v1/metrics"
READ_CHUNK_SIZE = 65536

# [LAW:one-source-of-truth] The only response this server ever sends.
FIXED_RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Type: application/json\r\n"
    b"Content-Length: 2\r\n"
    b"Connection: close\r\n"
    b"\r\n"
    b"{}"
)

MetricsCallback = Callable[[list[MetricDataPoint]], None]


class ServerState(Enum):
    IDLE = "idle"
    READY = "ready"
    FAILED = "failed"
    STOPPED = "stopped"


class OTLPServer:
    """Listener plus per-connection handler for OTLP/HTTP JSON exports."""

    def __init__(self, port: int = DEFAULT_PORT, on_metrics_received: MetricsCallback | None = None):
        self._requested_port = port
        self.on_metrics_received = on_metrics_received
        self.state = ServerState.IDLE
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()

    @property
    def host(self) -> str:
        return LOOPBACK_HOST

    @property
    def port(self) -> int:
        """Bound port once READY, else the requested port."""
        if self._server is not None and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self._requested_port

    async def start(self) -> bool:
        """Bind and start accepting. False (and FAILED for good) if binding fails."""
        if self.state is not ServerState.IDLE:
            return self.state is ServerState.READY
        try:
            self._server = await asyncio.start_server(
                self._handle_connection, host=LOOPBACK_HOST, port=self._requested_port
            )
        except OSError as e:
            self.state = ServerState.FAILED
            logger.error("OTLP server failed to bind %s:%s: %s", LOOPBACK_HOST, self._requested_port, e)
            return False
        self.state = ServerState.READY
        logger.info("OTLP server listening on %s:%s", LOOPBACK_HOST, self.port)
        return True

    async def serve_forever(self) -> None:
        """Serve until stop() is called. Returns at once if not READY."""
        if self._server is None or self.state is not ServerState.READY:
            return
        try:
            await self._server.serve_forever()
        except asyncio.CancelledError:
            # serve_forever is cancelled by close(); stop() owns the shutdown.
            if self.state is not ServerState.STOPPED:
                raise

    async def stop(self) -> None:
        if self._server is None:
            return
        self.state = ServerState.STOPPED
        self._server.close()
        # Idle connections would otherwise hold wait_closed() open indefinitely.
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("OTLP server stopped")

    # ─── Connection handling ────────────────────────────────────────────────

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            request = await self._read_request(reader)
            if request is None:
                logger.debug("connection closed before a complete request arrived")
                return
            self.dispatch(request)
            writer.write(FIXED_RESPONSE)
            await writer.drain()
        except (ConnectionError, OSError) as e:
            logger.debug("connection error: %s", e)
        finally:
            self._writers.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    @staticmethod
    async def _read_request(reader: asyncio.StreamReader) -> HTTPRequest | None:
        framer = HTTPRequestFramer()
        while True:
            chunk = await reader.read(READ_CHUNK_SIZE)
            if not chunk:
                return None
            request = framer.feed(chunk)
            if request is not None:
                return request

    def dispatch(self, request: HTTPRequest) -> None:
        """Route a complete request. Only POST /v1/metrics is processed."""
        if request.method != "POST" or request.path != METRICS_PATH:
            # Logs, traces, anything else: acknowledged and discarded.
            logger.debug("discarding %s %s", request.method, request.path)
            return

        data_points = decode_metrics(request.body)
        if not data_points:
            return
        if self.on_metrics_received is None:
            return
        try:
            self.on_metrics_received(data_points)
        except Exception:
            # Observer failures never reach the client or the listener.
            logger.exception("metrics observer failed")
