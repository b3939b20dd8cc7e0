"""
Metrics HTTP Server.

Publishes the metrics registry at ``/metrics`` using a FastAPI app served by
uvicorn on a daemon thread, so the copy itself stays on the main thread. The
root path redirects to ``/metrics``.
"""

import logging
import socket
import threading
import time
from typing import Optional, Tuple

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, RedirectResponse

from allcat import __version__
from allcat.metrics.registry import MetricsRegistry, registry

logger = logging.getLogger(__name__)

EXPOSITION_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def create_app(metrics: MetricsRegistry = registry) -> FastAPI:
  """
  Builds the metrics app.

  Args:
      metrics (MetricsRegistry): Registry to expose.

  Returns:
      FastAPI: App with ``GET /metrics`` and a redirect from ``/``.
  """
  app = FastAPI(title="allcat metrics", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)

  @app.get("/metrics", response_class=PlainTextResponse)
  def get_metrics() -> PlainTextResponse:
    return PlainTextResponse(metrics.render(), media_type=EXPOSITION_CONTENT_TYPE)

  @app.get("/")
  def root() -> RedirectResponse:
    return RedirectResponse(url="/metrics", status_code=301)

  return app


def parse_address(address: str) -> Tuple[str, int]:
  """
  Splits ``host:port`` into its parts.

  An empty host (``:9100``) means all IPv4 interfaces; port 0 asks the kernel
  for a free port.

  Args:
      address (str): ``host:port`` or ``:port``.

  Returns:
      Tuple[str, int]: The host and the port.

  Raises:
      ValueError: If the address has no valid port.
  """
  host, sep, port = address.rpartition(":")
  if not sep:
    raise ValueError(f"Metrics address must be host:port, got {address!r}")
  try:
    port_num = int(port)
  except ValueError:
    raise ValueError(f"Invalid port in metrics address {address!r}")
  if not 0 <= port_num <= 65535:
    raise ValueError(f"Port out of range in metrics address {address!r}")
  return host or "0.0.0.0", port_num


class MetricsServer:
  """
  Runs the metrics app in the background.

  Attributes:
      address (str): The requested ``host:port``.
      bound (Optional[str]): The actual ``host:port`` once started.
  """

  def __init__(self, address: str, metrics: MetricsRegistry = registry):
    self.address = address
    self.bound: Optional[str] = None
    self._app = create_app(metrics)
    self._server: Optional[uvicorn.Server] = None
    self._thread: Optional[threading.Thread] = None
    self._socket: Optional[socket.socket] = None

  def start(self, timeout: float = 5.0) -> str:
    """
    Binds the listener and starts serving.

    Args:
        timeout (float): Seconds to wait for uvicorn to report startup.

    Returns:
        str: The bound ``host:port`` (useful when port 0 was requested).

    Raises:
        OSError: If the address cannot be bound.
        RuntimeError: If the server does not start in time.
    """
    host, port = parse_address(self.address)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
      sock.bind((host, port))
    except OSError:
      sock.close()
      raise
    self._socket = sock

    bound_host, bound_port = sock.getsockname()[:2]
    self.bound = f"{bound_host}:{bound_port}"

    config = uvicorn.Config(self._app, log_level="warning", access_log=False)
    self._server = uvicorn.Server(config)
    self._thread = threading.Thread(
      target=self._server.run,
      kwargs={"sockets": [sock]},
      name="allcat-metrics",
      daemon=True,
    )
    self._thread.start()

    deadline = time.monotonic() + timeout
    while not self._server.started:
      if not self._thread.is_alive() or time.monotonic() > deadline:
        self.stop()
        raise RuntimeError(f"metrics server failed to start on {self.bound}")
      time.sleep(0.01)

    logger.debug("metrics server listening on %s", self.bound)
    return self.bound

  @property
  def url(self) -> Optional[str]:
    return f"http://{self.bound}/metrics" if self.bound else None

  def stop(self, timeout: float = 5.0) -> None:
    """Signals uvicorn to exit and waits up to ``timeout`` seconds."""
    if self._server is not None:
      self._server.should_exit = True
    if self._thread is not None:
      self._thread.join(timeout)
      if self._thread.is_alive():
        logger.error("metrics server did not shut down within %.1fs", timeout)
    if self._socket is not None:
      self._socket.close()
    self._server = None
    self._thread = None
    self._socket = None

  def __enter__(self) -> "MetricsServer":
    self.start()
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.stop()
