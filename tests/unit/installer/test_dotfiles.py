"""Tests for dotfile templates and helpers."""

from riftkit.installer.base import StepStatus
from riftkit.installer.dotfiles import (
    BASH_ALIASES,
    AliasesModule,
    append_once,
    count_lines,
    write_if_absent,
)


class TestAppendOnce:
    def test_appends_block(self, tmp_path):
        rc = tmp_path / ".bashrc"
        rc.write_text("# existing\n")

        assert append_once(rc, ".agent_aliases", "source ~/.agent_aliases") is True
        assert rc.read_text() == "# existing\nsource ~/.agent_aliases\n"

    def test_marker_present_is_noop(self, tmp_path):
        rc = tmp_path / ".bashrc"
        rc.write_text("source ~/.agent_aliases\n")

        assert append_once(rc, ".agent_aliases", "source ~/.agent_aliases") is False
        assert rc.read_text() == "source ~/.agent_aliases\n"

    def test_missing_file_left_alone(self, tmp_path):
        assert append_once(tmp_path / ".zshrc", "marker", "line") is False
        assert not (tmp_path / ".zshrc").exists()


class TestWriteHelpers:
    def test_write_if_absent(self, user_ctx):
        target = user_ctx.home / ".config" / "starship.toml"
        assert write_if_absent(user_ctx, target, "a") is True
        assert write_if_absent(user_ctx, target, "b") is False
        assert target.read_text() == "a"

    def test_count_lines(self, tmp_path):
        path = tmp_path / "CLAUDE.md"
        path.write_text("one\ntwo\nthree\n")
        assert count_lines(path) == 3
        assert count_lines(tmp_path / "missing") == 0


class TestAliasesModule:
    def test_writes_aliases_and_sources_them(self, install_ctx, user_ctx):
        (user_ctx.home / ".bashrc").write_text("# rc\n")

        result = AliasesModule(install_ctx).run()

        assert result.success
        assert (user_ctx.home / ".bash_aliases").read_text() == BASH_ALIASES
        assert "~/.bash_aliases" in (user_ctx.home / ".bashrc").read_text()

    def test_second_run_does_not_duplicate_source_line(self, install_ctx, user_ctx):
        (user_ctx.home / ".bashrc").write_text("# rc\n")

        AliasesModule(install_ctx).run()
        AliasesModule(install_ctx).run()

        assert (user_ctx.home / ".bashrc").read_text().count("source ~/.bash_aliases") == 1

    def test_skip_existing(self, install_ctx, user_ctx):
        install_ctx.skip_existing = True
        (user_ctx.home / ".bash_aliases").write_text("alias mine='ls'\n")

        result = AliasesModule(install_ctx).run()

        assert result.steps[0].status is StepStatus.SKIPPED
        assert (user_ctx.home / ".bash_aliases").read_text() == "alias mine='ls'\n"
