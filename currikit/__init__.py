"""
Curriculum ordering toolkit.

Turns a flat pool of theory, question and task items into an ordered,
module-by-module curriculum that respects declared prerequisites.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("currikit")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
