"""garmin-cache: local, queryable cache of Garmin Connect activities."""

import tomllib
from pathlib import Path

try:
    # Development mode: read the version straight from pyproject.toml
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    __version__ = data["project"]["version"]
except Exception:
    # Installed in non-editable mode: fall back to package metadata
    try:
        from importlib.metadata import version

        __version__ = version("garmin-cache")
    except Exception:
        __version__ = "0.0.0-dev"
