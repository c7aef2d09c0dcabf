"""Environment driven defaults for NodeLink Session."""
import os

# Browser-compatible localStorage key prefix: "<prefix>:<namespace>".
STORAGE_PREFIX = os.environ.get("NODELINK_STORAGE_PREFIX", "lnc-web")

DEFAULT_NAMESPACE = os.environ.get("NODELINK_NAMESPACE", "default")

# Unset means credentials live in memory for the lifetime of the process.
STORAGE_PATH = os.environ.get("NODELINK_STORAGE_PATH") or None

LOGGER_NAME = "nodelink.session"
