r"""Image and compose project naming.

The image tag is a wire contract with the container engine and with anyone
consuming an exported archive::

    ^[a-z0-9_]+:\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}$
"""

import re
from datetime import datetime

TAG_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
TAG_PATTERN = re.compile(r"^[a-z0-9_]+:\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}$")
FALLBACK_NAME = "app"


def normalize_app_name(name: str) -> str:
    """Lower-case the name, turn spaces and hyphens into underscores, drop the rest.

    >>> normalize_app_name("My Shop-Front!")
    'my_shop_front'
    """
    normalized = name.strip().lower().replace(" ", "_").replace("-", "_")
    normalized = re.sub(r"[^a-z0-9_]", "", normalized)
    return normalized or FALLBACK_NAME


def compute_image_tag(app_name: str, now: datetime | None = None) -> str:
    """Build ``<normalized-app-name>:<YYYY-MM-DD_HH-MM-SS>`` at second resolution."""
    now = now or datetime.now()
    return f"{normalize_app_name(app_name)}:{now.strftime(TAG_TIMESTAMP_FORMAT)}"
