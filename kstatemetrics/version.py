"""Build and runtime version information."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass

RELEASE = "UNKNOWN"
COMMIT = "UNKNOWN"
BUILD_DATE = ""


def _os_name() -> str:
    return platform.system().lower() or sys.platform


def _arch() -> str:
    return platform.machine().lower() or "unknown"


@dataclass(frozen=True)
class Version:
    """Version details of the running exporter."""

    git_commit: str
    build_date: str
    release: str
    python_version: str
    compiler: str
    platform: str

    def __str__(self) -> str:
        program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "."
        return (
            f"{program}/{self.release} ({self.platform}) "
            f"kube-state-metrics/{self.git_commit}"
        )


def get_version() -> Version:
    """Return the current version information."""
    return Version(
        git_commit=COMMIT,
        build_date=BUILD_DATE,
        release=RELEASE,
        python_version=platform.python_version(),
        compiler=platform.python_implementation(),
        platform=f"{_os_name()}/{_arch()}",
    )