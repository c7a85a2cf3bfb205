import sys
import socket
import logging
import threading
from typing import Dict, List, Optional, Tuple

import requests

from devhost.local.config import effective_settings as config

PUSH_PATH = "/loki/api/v1/push"
PUSH_TIMEOUT = 5

Labels = Tuple[Tuple[str, str], ...]


class LokiHandler(logging.Handler):
    """
    Pushes supervisor and module log lines to a Grafana Loki instance.

    Lines are buffered and sent in batches. Each batch groups its lines into
    one stream per label set, so a run shows up in Loki as a handful of
    streams sharing the `connection` label. A daemon thread pushes whatever
    is pending every `LOG_BUFFER_FLUSH_INTERVAL` seconds.
    """

    def __init__(self, url: str, org_id: Optional[str] = None, connection_id: Optional[str] = None,
                 start_thread: bool = True):
        """
        :param url: The base URL of the Loki instance.
        :param org_id: Optional tenant, sent as `X-Scope-OrgID`.
        :param connection_id: The run's connection identity, used as a stream label.
        :param start_thread: Whether to start the periodic push thread.
        """
        super().__init__()
        self.push_url = url.rstrip("/") + PUSH_PATH
        self.base_labels = {
            "job": "devhost",
            "hostname": socket.gethostname() or "unknown-host",
            "connection": connection_id or "unknown",
        }
        self.session = requests.Session()
        self.session.headers["Content-Type"] = "application/json"
        if org_id:
            self.session.headers["X-Scope-OrgID"] = org_id

        self._pending: List[Tuple[Labels, List[str]]] = []
        self._pending_lock = threading.Lock()
        self._stopped = threading.Event()
        self._pusher: Optional[threading.Thread] = None
        if start_thread:
            self._pusher = threading.Thread(target=self._push_periodically, name="LokiPushThread", daemon=True)
            self._pusher.start()

    def labels_for(self, record: logging.LogRecord) -> Dict[str, str]:
        """Returns the stream labels of one record."""
        return dict(self.base_labels, level=record.levelname.lower(), logger=record.name)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            labels = tuple(sorted(self.labels_for(record).items()))
            value = [str(int(record.created * 1e9)), self.format(record)]
            with self._pending_lock:
                self._pending.append((labels, value))
                batch_full = len(self._pending) >= config.LOG_BUFFER_SIZE
            if batch_full:
                self.flush()
        except Exception:
            self.handleError(record)

    def build_streams(self, pending: List[Tuple[Labels, List[str]]]) -> List[Dict]:
        """
        Groups pending lines into Loki streams, keeping their order within a stream.
        """
        grouped: Dict[Labels, List[List[str]]] = {}
        for labels, value in pending:
            grouped.setdefault(labels, []).append(value)
        return [{"stream": dict(labels), "values": values} for labels, values in grouped.items()]

    def flush(self) -> None:
        """Pushes everything pending. The request is made outside the buffer lock."""
        with self._pending_lock:
            pending, self._pending = self._pending, []
        if not pending:
            return

        try:
            response = self.session.post(self.push_url, json={"streams": self.build_streams(pending)},
                                         timeout=PUSH_TIMEOUT)
        except requests.RequestException as e:
            print(f"CRITICAL: Could not push {len(pending)} log lines to Loki: {e}", file=sys.stderr)
            return
        # Loki answers a successful push with 204 No Content
        if response.status_code != 204:
            print(f"ERROR: Loki rejected a push: {response.status_code} - {response.text}", file=sys.stderr)

    def _push_periodically(self) -> None:
        while not self._stopped.wait(config.LOG_BUFFER_FLUSH_INTERVAL):
            self.flush()

    def close(self) -> None:
        """Stops the push thread and sends what is left."""
        self._stopped.set()
        if self._pusher is not None and self._pusher.is_alive():
            self._pusher.join(timeout=config.LOG_BUFFER_FLUSH_INTERVAL + 2)
        self.flush()
        self.session.close()
        super().close()
