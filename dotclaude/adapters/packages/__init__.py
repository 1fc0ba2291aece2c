"""Package-manager adapters — one PackageInstaller per platform tool."""

from dotclaude.adapters.packages.base import PackageInstaller
from dotclaude.adapters.packages.managers import (
    AptInstaller,
    DnfInstaller,
    HomebrewInstaller,
    PacmanInstaller,
)

__all__ = [
    "AptInstaller",
    "DnfInstaller",
    "HomebrewInstaller",
    "PackageInstaller",
    "PacmanInstaller",
]
