"""
Tests for OS detection and confirmation providers.
"""

import io

import pytest

from dotclaude.adapters.mock import MockSystemAdapter
from dotclaude.core.prompts import (
    AutoConfirmer,
    InteractiveConfirmer,
    ScriptedConfirmer,
    confirmer_for,
)
from dotclaude.core.services.platform_detect import detect_os, detect_os_stage


class TestDetectOs:
    @pytest.mark.parametrize("name, kind", [
        ("Darwin", "macos"),
        ("Linux", "linux"),
        ("Windows", "unknown"),
        ("", "unknown"),
    ])
    def test_mapping(self, name, kind):
        assert detect_os(MockSystemAdapter(system=name)) == kind

    def test_stage_success(self, console):
        receipt = detect_os_stage(MockSystemAdapter(system="Linux"), console)
        assert receipt.ok
        assert receipt.output == "linux"

    def test_stage_unsupported(self, console):
        receipt = detect_os_stage(MockSystemAdapter(system="SunOS"), console)
        assert receipt.failed
        assert receipt.error_kind == "environment"
        assert receipt.error == "Unsupported operating system: SunOS"


class TestConfirmers:
    def test_auto(self):
        assert AutoConfirmer().confirm("Install GNU Stow?")
        assert not AutoConfirmer(answer=False).confirm("Install GNU Stow?")

    def test_scripted(self):
        c = ScriptedConfirmer(answers={"Node.js": False})
        assert not c.confirm("Install Node.js?")
        assert c.confirm("Install GNU Stow?")
        assert c.asked == ["Install Node.js?", "Install GNU Stow?"]

    def test_interactive_declines_without_terminal(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("y\n"))
        assert not InteractiveConfirmer().confirm("Install GNU Stow?")

    def test_confirmer_for_yes_flag(self):
        assert isinstance(confirmer_for(True), AutoConfirmer)
        assert isinstance(confirmer_for(False), InteractiveConfirmer)
