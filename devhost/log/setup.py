import sys
import logging
from typing import Optional

from devhost.local.config import effective_settings as config
from devhost.log.handler import LokiHandler

# Logger that carries the module's own log lines; see the router's `log` handler.
MODULE_LOGGER = "module"
CONSOLE_FORMAT = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'


class MainFormatter(logging.Formatter):
    """
    Console formatter. Supervisor records get a timestamp and level, relayed
    module records are printed exactly as the router rendered them.
    """

    def __init__(self) -> None:
        super().__init__(CONSOLE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.name == MODULE_LOGGER or record.name.startswith(MODULE_LOGGER + "."):
            return record.getMessage()
        return super().format(record)


def setup_logging(console_level: int = logging.INFO, connection_id: Optional[str] = None) -> None:
    """
    Replaces the bootstrap logging of `main.py` with the supervisor's handlers.

    :param console_level: Level of the stdout handler (DEBUG with `--verbose`).
    :param connection_id: The run's connection identity, used as a Loki label.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(MainFormatter())
    root.addHandler(console)

    if not config.LOKI_ENABLED:
        return
    loki = LokiHandler(url=config.LOKI_URL, org_id=config.LOKI_ORG_ID, connection_id=connection_id)
    # DEBUG output stays on the console
    loki.setLevel(logging.INFO)
    root.addHandler(loki)
    root.info(f"Pushing logs to Grafana Loki at {config.LOKI_URL}.")
