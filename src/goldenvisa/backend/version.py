"""Resolve the calculator version from package metadata or ``pyproject.toml``."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "goldenvisa"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_SECTION_PATTERN = re.compile(r"^\[(?P<name>[^\]]+)\]\s*$")
_VERSION_PATTERN = re.compile(r"""^version\s*=\s*["'](?P<version>[^"']+)["']""")


def read_pyproject_version(path: Path = PYPROJECT_PATH) -> str:
    """Return the ``[project]`` version declared in ``path``.

    Used when the distribution is not installed, such as when the tests run
    straight from a checkout.
    """

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    in_project = False
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        section = _SECTION_PATTERN.match(line)
        if section:
            in_project = section.group("name") == "project"
            continue
        if not in_project:
            continue
        match = _VERSION_PATTERN.match(line)
        if match:
            return match.group("version")

    raise RuntimeError(f"No [project] version declared in {path.name}")


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, else the ``pyproject.toml`` one."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version()


__all__ = ["PACKAGE_NAME", "PYPROJECT_PATH", "get_project_version", "read_pyproject_version"]
