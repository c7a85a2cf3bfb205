"""
This module contains the configuration settings for the DevHost supervisor.
It defines the child interpreter, the synthetic configuration defaults,
logging options and the runtime override file.
"""

import os
import pathlib
from dotenv import find_dotenv, load_dotenv

# Load environment variables from the .env file of the directory devhost is started in
load_dotenv(find_dotenv(usecwd=True), override=True)

#* --- Core Paths ---
# Relative paths are taken from the directory devhost is started in
OVERRIDES_JSON_PATH = pathlib.Path(os.getenv("DEVHOST_OVERRIDES_PATH", "devhost.overrides.json"))

#* --- Child Process Settings ---
# The interpreter used to run the module entry. Node modules expect 'node'.
INTERPRETER = os.getenv("DEVHOST_INTERPRETER", "node")
# Extra interpreter flags, space separated (e.g. "--inspect --trace-warnings")
INTERPRETER_FLAGS = os.getenv("DEVHOST_INTERPRETER_FLAGS", "").split()
SOURCE_MAPS_FLAG = "--enable-source-maps"
EXECUTION_MODE = os.getenv("DEVHOST_EXECUTION_MODE", "development")
TERMINATE_TIMEOUT = float(os.getenv("DEVHOST_TERMINATE_TIMEOUT", "5"))  # seconds before force-killing

#* --- Environment keys injected into the child ---
ENV_MANIFEST_KEY = "MODULE_MANIFEST"
ENV_CONNECTION_KEY = "CONNECTION_ID"
ENV_INSTANCE_KEY = "MODULE_INSTANCE_ID"
ENV_MODE_KEY = "NODE_ENV"
# Node.js attaches process.send()/process.on('message') to this descriptor.
ENV_CHANNEL_FD_KEY = "NODE_CHANNEL_FD"
ENV_CHANNEL_MODE_KEY = "NODE_CHANNEL_SERIALIZATION_MODE"

#* --- Identity ---
CONNECTION_ID_PREFIX = "devhost"
CONNECTION_ID_SUFFIX_BITS = 52

#* --- Synthetic Module Configuration ---
CONFIG_HOST = os.getenv("DEVHOST_CONFIG_HOST", "192.168.0.50")
CONFIG_PORT = int(os.getenv("DEVHOST_CONFIG_PORT", "80"))
CONFIG_PROTOCOL = os.getenv("DEVHOST_CONFIG_PROTOCOL", "http")

#* --- Grafana Loki (optional log sink) ---
LOKI_ENABLED = os.getenv("LOKI_ENABLED", "False").lower() in ('true', '1', 't')
LOKI_URL = os.getenv("LOKI_URL", "http://localhost:3100")
LOKI_ORG_ID = os.getenv("LOKI_ORG_ID", "fake")
LOG_BUFFER_SIZE = 100
LOG_BUFFER_FLUSH_INTERVAL = 5

#* --- Console ---
REPL_EXAMPLE = '{"type":"action","payload":{"id":"preset_recall","preset":3}}'

#* --- MODIFIABLE SETTINGS (Changeable through the overrides file) ---
MODIFIABLE_SETTINGS = {
    # Child process
    "INTERPRETER", "INTERPRETER_FLAGS", "EXECUTION_MODE", "TERMINATE_TIMEOUT",
    # Synthetic configuration
    "CONFIG_HOST", "CONFIG_PORT", "CONFIG_PROTOCOL",
    # Logging
    "LOG_BUFFER_SIZE", "LOG_BUFFER_FLUSH_INTERVAL",
}
