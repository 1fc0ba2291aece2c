"""
Tests for the backup stage — timestamped copies, symlink preservation, idempotence.
"""

from pathlib import Path

import pytest

from dotclaude.core.services.backup import (
    backup_file,
    backup_path_for,
    backup_stage,
    file_sha256,
    list_backups,
)


def _populate(home: Path) -> None:
    (home / ".claude").mkdir()
    (home / ".claude" / "settings.json").write_text('{"theme": "dark"}')
    (home / ".mcp.json").write_text('{"mcpServers": {}}')


class TestBackupHelpers:
    def test_path_format(self, tmp_path: Path):
        p = backup_path_for(tmp_path / ".claude", timestamp="20240101-120000")
        assert p.name == ".claude.backup.20240101-120000"

    def test_collision_gets_suffix(self, tmp_path: Path):
        (tmp_path / ".claude.backup.20240101-120000").mkdir()
        p = backup_path_for(tmp_path / ".claude", timestamp="20240101-120000")
        assert p.name == ".claude.backup.20240101-120000-1"

    def test_backup_directory_preserves_contents(self, tmp_path: Path):
        src = tmp_path / ".claude"
        (src / "agents").mkdir(parents=True)
        (src / "agents" / "a.md").write_text("agent")
        (src / "link").symlink_to("agents")

        dest = backup_file(src)

        assert (dest / "agents" / "a.md").read_text() == "agent"
        assert (dest / "link").is_symlink()
        assert src.is_dir()

    def test_backup_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            backup_file(tmp_path / "nope")

    def test_list_backups_sorted(self, tmp_path: Path):
        f = tmp_path / ".mcp.json"
        f.write_text("{}")
        backup_file(f, timestamp="20240102-000000")
        backup_file(f, timestamp="20240101-000000")
        assert [p.name for p in list_backups(f)] == [
            ".mcp.json.backup.20240101-000000",
            ".mcp.json.backup.20240102-000000",
        ]


class TestBackupStage:
    def test_backs_up_and_removes(self, make_ctx, home: Path):
        _populate(home)
        ctx = make_ctx()

        receipt = backup_stage(ctx)

        assert receipt.ok
        assert len(receipt.metadata["backups"]) == 2
        assert not (home / ".claude").exists()
        assert not (home / ".mcp.json").exists()
        [cfg_backup] = list_backups(home / ".claude")
        assert (cfg_backup / "settings.json").read_text() == '{"theme": "dark"}'
        [mcp_backup] = list_backups(home / ".mcp.json")
        assert mcp_backup.read_text() == '{"mcpServers": {}}'
        assert ctx.state.backups == receipt.metadata["backups"]

    def test_nothing_to_back_up(self, make_ctx, home: Path):
        receipt = backup_stage(make_ctx())
        assert receipt.ok
        assert receipt.metadata["backups"] == []
        assert list(home.iterdir()) == []

    def test_symlink_preserved(self, make_ctx, home: Path, source_root: Path):
        (home / ".claude").symlink_to(source_root / "claude" / ".claude")

        receipt = backup_stage(make_ctx())

        assert receipt.ok
        assert (home / ".claude").is_symlink()
        assert list_backups(home / ".claude") == []

    def test_no_backup_flag(self, make_ctx, config, home: Path):
        _populate(home)
        ctx = make_ctx(config=config.model_copy(update={"no_backup": True}))

        receipt = backup_stage(ctx)

        assert receipt.status == "skipped"
        assert (home / ".claude" / "settings.json").exists()
        assert list_backups(home / ".claude") == []

    def test_rendered_mcp_file_not_backed_up_again(self, make_ctx, home: Path):
        mcp = home / ".mcp.json"
        mcp.write_text('{"mcpServers": {"context7": {}}}')
        ctx = make_ctx()
        ctx.state.mcp_rendered_sha256 = file_sha256(mcp)

        receipt = backup_stage(ctx)

        assert receipt.ok
        assert receipt.metadata["backups"] == []
        assert not mcp.exists()

    def test_edited_mcp_file_is_backed_up(self, make_ctx, home: Path):
        mcp = home / ".mcp.json"
        mcp.write_text('{"mcpServers": {}}')
        ctx = make_ctx()
        ctx.state.mcp_rendered_sha256 = "0" * 64

        receipt = backup_stage(ctx)

        assert len(receipt.metadata["backups"]) == 1

    def test_identical_to_latest_backup(self, make_ctx, home: Path):
        mcp = home / ".mcp.json"
        mcp.write_text('{"mcpServers": {}}')
        backup_file(mcp, timestamp="20240101-000000")

        receipt = backup_stage(make_ctx())

        assert receipt.metadata["backups"] == []
        assert len(list_backups(mcp)) == 1
        assert not mcp.exists()

    def test_copy_failure_keeps_original(self, make_ctx, home: Path, monkeypatch):
        _populate(home)

        def _boom(path, timestamp=None):
            raise OSError("disk full")

        monkeypatch.setattr("dotclaude.core.services.backup.backup_file", _boom)

        receipt = backup_stage(make_ctx())

        assert receipt.failed
        assert receipt.error_kind == "state_conflict"
        assert "disk full" in receipt.error
        assert (home / ".claude" / "settings.json").exists()

    def test_numeric_suffixes_sort_numerically(self, tmp_path: Path):
        f = tmp_path / ".mcp.json"
        for name in ("20240101-120000-10", "20240101-120000-2", "20240101-120000", "20231231-235959-11"):
            (tmp_path / f".mcp.json.backup.{name}").write_text(name)

        assert [p.name.rsplit(".", 1)[-1] for p in list_backups(f)] == [
            "20231231-235959-11",
            "20240101-120000",
            "20240101-120000-2",
            "20240101-120000-10",
        ]

    def test_identical_to_highest_suffix_backup(self, make_ctx, home: Path):
        mcp = home / ".mcp.json"
        (home / ".mcp.json.backup.20240101-120000-2").write_text('{"old": true}')
        (home / ".mcp.json.backup.20240101-120000-10").write_text('{"mcpServers": {}}')
        mcp.write_text('{"mcpServers": {}}')

        receipt = backup_stage(make_ctx())

        assert receipt.metadata["backups"] == []
        assert len(list_backups(mcp)) == 2
