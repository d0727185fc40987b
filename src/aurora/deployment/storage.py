"""Persistent storage layout.

Aurora keeps logs (and exported images by default) under a storage root in
the project::

    <storage-root>/              created 0777, recursive
    <storage-root>/.gitignore    "*"
    <storage-root>/logs/nginx/   created 0777, recursive

The layout is created on every orchestrator construction. Every step checks
for existence first and tolerates a concurrent creator, so calling it again
is a no-op.
"""

import os
from pathlib import Path

from aurora.utils.logger import get_logger

logger = get_logger("storage")

GITIGNORE_CONTENT = "*"
NGINX_LOGS_SUBPATH = Path("logs") / "nginx"


def ensure_storage_exists(storage_root: str | Path) -> Path:
    """Create the storage root, its .gitignore and logs/nginx if missing.

    Filesystem errors (e.g. permission denied) propagate to the caller.

    Args:
        storage_root: Absolute path of the storage root

    Returns:
        The storage root as a Path
    """
    root = Path(storage_root)

    if not root.exists():
        os.makedirs(root, mode=0o777, exist_ok=True)
        logger.debug(f"Created storage directory {root}")

    gitignore = root / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(GITIGNORE_CONTENT)

    nginx_logs = root / NGINX_LOGS_SUBPATH
    if not nginx_logs.exists():
        os.makedirs(nginx_logs, mode=0o777, exist_ok=True)
        logger.debug(f"Created log directory {nginx_logs}")

    return root
