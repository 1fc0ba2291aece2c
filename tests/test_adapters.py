"""
Tests for adapters — mock host, shell host, package installers, registry.
"""

from dotclaude.adapters.base import OUTPUT_LIMIT, CommandResult, trim_output
from dotclaude.adapters.mock import MockSystemAdapter
from dotclaude.adapters.packages import (
    AptInstaller,
    DnfInstaller,
    HomebrewInstaller,
    PacmanInstaller,
)
from dotclaude.adapters.registry import PackageInstallerRegistry
from dotclaude.adapters.shell.command import ShellSystemAdapter
from dotclaude.core.models.settings import InstallerSettings


def _tool(tool_id: str):
    return next(t for t in InstallerSettings().tools if t.id == tool_id)


# ── CommandResult ────────────────────────────────────────────────────


class TestTrimOutput:
    def test_short_text_untouched(self):
        assert trim_output("abc", 10) == "abc"

    def test_keeps_tail(self):
        assert trim_output("abcdef", 3) == "def"

    def test_no_limit(self):
        assert trim_output("a" * 10_000, None) == "a" * 10_000


class TestCommandResult:
    def test_ok(self):
        assert CommandResult(cmd=["true"]).ok

    def test_error_is_not_ok(self):
        assert not CommandResult(cmd=["x"], returncode=0, error="Command not found: x").ok

    def test_combined_output(self):
        r = CommandResult(stdout="out", stderr="err")
        assert r.combined_output == "out\nerr"
        assert r.first_line == "out"

    def test_describe_error_includes_stderr(self):
        r = CommandResult(cmd=["stow", "claude"], returncode=1, stderr="conflict")
        msg = r.describe_error()
        assert "exit 1" in msg
        assert "stow claude" in msg
        assert "conflict" in msg


# ── Mock adapter ─────────────────────────────────────────────────────


class TestMockSystemAdapter:
    def test_binaries(self):
        mock = MockSystemAdapter(binaries=("stow",))
        assert mock.has("stow")
        assert not mock.has("npm")
        mock.add_binary("npm")
        assert mock.has("npm")
        mock.remove_binary("stow")
        assert not mock.has("stow")
        assert mock.probes == ["stow", "npm", "npm", "stow"]

    def test_default_response_succeeds(self):
        mock = MockSystemAdapter()
        result = mock.run(["anything", "at", "all"])
        assert result.ok
        assert result.cmd == ["anything", "at", "all"]

    def test_longest_prefix_wins(self):
        mock = MockSystemAdapter()
        mock.set_response("brew", stdout="generic")
        mock.set_response("brew tap", stdout="anthropics/claude")
        assert mock.run(["brew", "tap"]).stdout == "anthropics/claude"
        assert mock.run(["brew", "install", "x"]).stdout == "generic"

    def test_prefix_matches_whole_words(self):
        mock = MockSystemAdapter()
        mock.set_failure("npm")
        assert mock.run(["npx", "foo"]).ok
        assert not mock.run(["npm", "root", "-g"]).ok

    def test_provides_adds_binaries(self):
        mock = MockSystemAdapter()
        mock.provides("apt-get install", "stow")
        mock.run(["apt-get", "install", "-y", "stow"])
        assert mock.has("stow")

    def test_records_calls(self):
        mock = MockSystemAdapter()
        mock.run(["envsubst"], input_text="${A}", env={"A": "1"})
        mock.run(["apt-get", "update"], sudo=True)
        assert mock.call_count == 2
        assert mock.call_log[0].input_text == "${A}"
        assert mock.call_log[0].env == {"A": "1"}
        assert mock.calls_to("apt-get")[0].sudo
        assert mock.ran("apt-get update")

    def test_sudo_not_recorded_for_root(self):
        mock = MockSystemAdapter(root=True)
        mock.run(["apt-get", "update"], sudo=True)
        assert not mock.call_log[0].sudo

    def test_reset(self):
        mock = MockSystemAdapter()
        mock.set_failure("stow")
        mock.run(["stow"])
        mock.reset()
        assert mock.call_count == 0
        assert mock.run(["stow"]).ok

    def test_prepend_path(self):
        mock = MockSystemAdapter()
        mock.prepend_path("/opt/homebrew/opt/gettext/bin")
        mock.prepend_path("/opt/homebrew/opt/gettext/bin")
        assert mock.extra_path == ["/opt/homebrew/opt/gettext/bin"]

    def test_output_trimmed_like_real_host(self):
        mock = MockSystemAdapter()
        mock.set_response("cat", stdout="a" * (OUTPUT_LIMIT + 10))
        assert len(mock.run(["cat"]).stdout) == OUTPUT_LIMIT
        assert len(mock.run(["cat"], capture_limit=None).stdout) == OUTPUT_LIMIT + 10
        assert mock.call_log[-1].capture_limit is None


# ── Shell adapter ────────────────────────────────────────────────────


class TestShellSystemAdapter:
    def test_run_echo(self):
        result = ShellSystemAdapter().run(["echo", "hello"])
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_stdin_and_env(self):
        result = ShellSystemAdapter().run(
            ["sh", "-c", 'cat; printf "%s" "$DOTCLAUDE_TEST_VAR"'],
            input_text="in:",
            env={"DOTCLAUDE_TEST_VAR": "out"},
        )
        assert result.stdout == "in:out"

    def test_missing_command(self):
        result = ShellSystemAdapter().run(["definitely-not-a-real-binary-xyz"])
        assert not result.ok
        assert result.returncode == 127
        assert "Command not found" in result.error

    def test_nonzero_exit(self):
        result = ShellSystemAdapter().run(["sh", "-c", "echo nope >&2; exit 3"])
        assert result.returncode == 3
        assert "nope" in result.stderr

    def test_long_output_is_trimmed_by_default(self):
        text = "x" * (OUTPUT_LIMIT + 500) + "END"
        result = ShellSystemAdapter().run(["cat"], input_text=text)
        assert len(result.stdout) == OUTPUT_LIMIT
        assert result.stdout.endswith("END")

    def test_capture_limit_none_keeps_everything(self):
        text = "START" + "x" * (OUTPUT_LIMIT * 3) + "END"
        result = ShellSystemAdapter().run(["cat"], input_text=text, capture_limit=None)
        assert result.stdout == text

    def test_which(self):
        adapter = ShellSystemAdapter()
        assert adapter.has("sh")
        assert not adapter.has("definitely-not-a-real-binary-xyz")


# ── Package installers ───────────────────────────────────────────────


class TestPackageInstallers:
    def test_apt_updates_once_and_uses_sudo(self):
        mock = MockSystemAdapter(binaries=("apt-get",))
        apt = AptInstaller(mock)
        assert apt.install(_tool("stow")).ok
        assert apt.install(_tool("gettext")).ok

        lines = [c.line for c in mock.call_log]
        assert lines == [
            "apt-get update",
            "apt-get install -y stow",
            "apt-get install -y gettext-base",
        ]
        assert all(c.sudo for c in mock.call_log)

    def test_apt_node_runs_setup_script_first(self):
        mock = MockSystemAdapter(binaries=("apt-get",))
        AptInstaller(mock).install(_tool("node"))
        assert [c.cmd[0] for c in mock.call_log] == ["apt-get", "bash", "apt-get"]
        assert "nodesource" in mock.call_log[1].line
        assert mock.call_log[2].line == "apt-get install -y nodejs"

    def test_homebrew_no_sudo_and_post_paths(self):
        mock = MockSystemAdapter(system="Darwin", binaries=("brew",))
        assert HomebrewInstaller(mock).install(_tool("gettext")).ok
        assert mock.call_log[0].line == "brew install gettext"
        assert not mock.call_log[0].sudo
        assert "/opt/homebrew/opt/gettext/bin" in mock.extra_path

    def test_dnf_and_pacman_commands(self):
        mock = MockSystemAdapter()
        assert DnfInstaller(mock).install_command(["stow"]) == ["dnf", "install", "-y", "stow"]
        assert PacmanInstaller(mock).install_command(["stow"]) == ["pacman", "-S", "--noconfirm", "stow"]

    def test_failure_stops_sequence(self):
        mock = MockSystemAdapter(binaries=("apt-get",))
        mock.set_failure("apt-get update", stderr="network down")
        result = AptInstaller(mock).install(_tool("stow"))
        assert not result.ok
        assert "network down" in result.stderr
        assert not mock.ran("apt-get install")

    def test_no_package_mapping(self):
        mock = MockSystemAdapter()
        installer = HomebrewInstaller(mock)
        tool = _tool("stow").model_copy(update={"packages": {"apt": ["stow"]}})
        result = installer.install(tool)
        assert not result.ok
        assert "No Homebrew package" in result.error
        assert mock.call_count == 0


# ── Registry ─────────────────────────────────────────────────────────


class TestPackageInstallerRegistry:
    def test_selects_first_available_linux(self):
        mock = MockSystemAdapter(binaries=("dnf", "pacman"))
        reg = PackageInstallerRegistry(mock)
        assert reg.select("linux").id == "dnf"

    def test_macos_needs_brew(self):
        mock = MockSystemAdapter(system="Darwin")
        reg = PackageInstallerRegistry(mock)
        assert reg.select("macos") is None

    def test_selection_is_cached(self):
        mock = MockSystemAdapter(binaries=("apt-get",))
        reg = PackageInstallerRegistry(mock)
        first = reg.select("linux")
        mock.remove_binary("apt-get")
        assert reg.select("linux") is first

    def test_register_invalidates_cache(self):
        mock = MockSystemAdapter(system="Darwin")
        reg = PackageInstallerRegistry(mock, candidates={})
        assert reg.select("macos") is None
        mock.add_binary("brew")
        reg.register("macos", HomebrewInstaller(mock))
        assert reg.select("macos").id == "brew"

    def test_status(self):
        mock = MockSystemAdapter(binaries=("pacman",))
        reg = PackageInstallerRegistry(mock)
        assert reg.status("linux") == {"apt": False, "dnf": False, "pacman": True}
        assert [i.id for i in reg.candidates("linux")] == ["apt", "dnf", "pacman"]

    def test_unknown_os(self):
        reg = PackageInstallerRegistry(MockSystemAdapter())
        assert reg.select("unknown") is None
