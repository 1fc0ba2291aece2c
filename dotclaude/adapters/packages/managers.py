"""
Concrete package managers: Homebrew, apt, dnf, pacman.
"""

from __future__ import annotations

from dotclaude.adapters.packages.base import PackageInstaller


class HomebrewInstaller(PackageInstaller):
    id = "brew"
    binary = "brew"
    label = "Homebrew"
    needs_sudo = False

    def install_command(self, packages: list[str]) -> list[str]:
        return ["brew", "install"] + packages


class AptInstaller(PackageInstaller):
    id = "apt"
    binary = "apt-get"
    label = "apt"
    needs_sudo = True

    def __init__(self, system):
        super().__init__(system)
        self._index_fresh = False

    def prepare_commands(self) -> list[list[str]]:
        # One index refresh per run is enough.
        if self._index_fresh:
            return []
        self._index_fresh = True
        return [["apt-get", "update"]]

    def install_command(self, packages: list[str]) -> list[str]:
        return ["apt-get", "install", "-y"] + packages


class DnfInstaller(PackageInstaller):
    id = "dnf"
    binary = "dnf"
    label = "dnf"
    needs_sudo = True

    def install_command(self, packages: list[str]) -> list[str]:
        return ["dnf", "install", "-y"] + packages


class PacmanInstaller(PackageInstaller):
    id = "pacman"
    binary = "pacman"
    label = "pacman"
    needs_sudo = True

    def install_command(self, packages: list[str]) -> list[str]:
        return ["pacman", "-S", "--noconfirm"] + packages
