"""WorkPulse version lookup"""
from functools import lru_cache
from importlib import metadata
from pathlib import Path
import tomllib

PYPROJECT_PATH = Path(__file__).resolve().parent.parent / "pyproject.toml"


@lru_cache(maxsize=1)
def get_version() -> str:
    """Version from a source checkout's pyproject.toml, else from the installed distribution."""
    try:
        with open(PYPROJECT_PATH, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomllib.TOMLDecodeError):
        pass

    try:
        return metadata.version("workpulse")
    except metadata.PackageNotFoundError:
        return "unknown"
