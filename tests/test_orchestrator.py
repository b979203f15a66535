"""Tests for CleanRunOrchestrator — installer and runner are mocked."""

from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from cleanrun.config import RunOptions
from cleanrun.exceptions import InstallError, ResolutionError, RunError
from cleanrun.orchestrator import CleanRunOrchestrator


@pytest.fixture
def install():
    with patch("cleanrun.orchestrator.install_packages", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def runner():
    with patch("cleanrun.orchestrator.run_script", new_callable=AsyncMock) as mock:
        yield mock


def _fake_install(packages, cwd, **kwargs):
    """Side effect that mimics npm creating node_modules."""
    (Path(cwd) / "node_modules" / packages[0]).mkdir(parents=True)


class TestLoadEntry:
    def test_stdin(self):
        entry = CleanRunOrchestrator().load_entry("-", io.StringIO("require('a')"))
        assert entry.is_virtual
        assert entry.content == "require('a')"

    def test_file_resolved(self, write_js):
        script = write_js("app.js")
        entry = CleanRunOrchestrator().load_entry(str(script.with_suffix("")))
        assert entry.path == str(script.resolve())

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResolutionError):
            CleanRunOrchestrator().load_entry(str(tmp_path / "nope.js"))


class TestRun:
    @pytest.mark.asyncio
    async def test_stdin_entry(self, tmp_path, install, runner):
        code = 'require("left-pad")'
        orch = CleanRunOrchestrator(RunOptions(cwd=tmp_path))
        output = await orch.run("-", stdin=io.StringIO(code))

        assert output.packages == ["left-pad"]
        install.assert_awaited_once()
        assert install.call_args.args[0] == ["left-pad"]
        runner.assert_awaited_once()
        assert runner.call_args.args[0] == ["-"]
        assert runner.call_args.kwargs["stdin"] == code

    @pytest.mark.asyncio
    async def test_file_entry_forwards_args(self, write_js, tmp_path, install, runner):
        script = write_js("app.js", "require('express'); require('./lib');")
        write_js("lib.js", "require('@scope/pkg/x'); require('fs');")
        work = tmp_path / "work"
        opts = RunOptions(cwd=work, silent=True, npm="my-npm", node="my-node")

        output = await CleanRunOrchestrator(opts).run(str(script), ["--port", "80"])

        assert output.packages == ["@scope/pkg", "express"]
        install.assert_awaited_once_with(
            ["@scope/pkg", "express"], work.resolve(), npm="my-npm", silent=True
        )
        runner.assert_awaited_once_with(
            [str(script), "--port", "80"],
            modules_dir=work.resolve() / "node_modules",
            node="my-node",
            stdin=None,
        )

    @pytest.mark.asyncio
    async def test_builtins_never_installed(self, write_js, tmp_path, install, runner):
        script = write_js("app.js", "require('fs'); require('node:path'); require('chalk');")
        await CleanRunOrchestrator(RunOptions(cwd=tmp_path)).run(str(script))
        assert install.call_args.args[0] == ["chalk"]

    @pytest.mark.asyncio
    async def test_no_packages_skips_install(self, write_js, tmp_path, install, runner):
        script = write_js("app.js", "require('fs');")
        orch = CleanRunOrchestrator(RunOptions(cwd=tmp_path))
        await orch.run(str(script))
        install.assert_not_awaited()
        runner.assert_awaited_once()
        assert orch.progress["install"].status == "skipped"

    @pytest.mark.asyncio
    async def test_resolution_error_before_any_write(self, write_js, tmp_path, install, runner):
        script = write_js("app.js", "require('./missing');")
        work = tmp_path / "work"
        orch = CleanRunOrchestrator(RunOptions(cwd=work, clean=True))
        with pytest.raises(ResolutionError):
            await orch.run(str(script))
        assert not work.exists()
        install.assert_not_awaited()
        runner.assert_not_awaited()
        assert orch.progress["scan"].status == "failed"

    @pytest.mark.asyncio
    async def test_install_failure_aborts_run(self, write_js, tmp_path, install, runner):
        install.side_effect = InstallError(["npm", "install"], 1)
        script = write_js("app.js", "require('left-pad');")
        orch = CleanRunOrchestrator(RunOptions(cwd=tmp_path))
        with pytest.raises(InstallError):
            await orch.run(str(script))
        runner.assert_not_awaited()
        assert orch.progress["install"].status == "failed"
        assert orch.progress["run"].status == "pending"

    @pytest.mark.asyncio
    async def test_progress_summary(self, write_js, tmp_path, install, runner):
        script = write_js("app.js", "require('left-pad');")
        orch = CleanRunOrchestrator(RunOptions(cwd=tmp_path))
        await orch.run(str(script))
        statuses = {p["phase"]: p["status"] for p in orch.progress.get_summary()}
        assert statuses == {
            "scan": "completed",
            "prepare": "completed",
            "install": "completed",
            "run": "completed",
            "cleanup": "skipped",
        }


class TestClean:
    @pytest.mark.asyncio
    async def test_removes_created_artifacts(self, write_js, tmp_path, install, runner):
        install.side_effect = _fake_install
        script = write_js("app.js", "require('left-pad');")
        work = tmp_path / "fresh"

        output = await CleanRunOrchestrator(RunOptions(cwd=work, clean=True)).run(str(script))

        assert output.workspace.created_root
        assert not work.exists()

    @pytest.mark.asyncio
    async def test_preexisting_artifacts_untouched(self, write_js, tmp_path, install, runner):
        install.side_effect = _fake_install
        work = tmp_path / "work"
        (work / "node_modules" / "keep").mkdir(parents=True)
        (work / "package.json").write_text('{"private": true}')
        script = write_js("app.js", "require('left-pad');")

        await CleanRunOrchestrator(RunOptions(cwd=work, clean=True)).run(str(script))

        assert (work / "package.json").read_text() == '{"private": true}'
        assert (work / "node_modules" / "keep").is_dir()
        assert (work / "node_modules" / "left-pad").is_dir()

    @pytest.mark.asyncio
    async def test_only_new_manifest_removed(self, write_js, tmp_path, install, runner):
        install.side_effect = _fake_install
        script = write_js("app.js", "require('left-pad');")

        await CleanRunOrchestrator(RunOptions(cwd=tmp_path, clean=True)).run(str(script))

        assert tmp_path.is_dir()
        assert script.exists()
        assert not (tmp_path / "package.json").exists()
        assert not (tmp_path / "node_modules").exists()

    @pytest.mark.asyncio
    async def test_cleanup_after_run_failure(self, write_js, tmp_path, install, runner):
        install.side_effect = _fake_install
        runner.side_effect = RunError(["node", "app.js"], 3)
        script = write_js("app.js", "require('left-pad');")
        work = tmp_path / "fresh"
        orch = CleanRunOrchestrator(RunOptions(cwd=work, clean=True))

        with pytest.raises(RunError):
            await orch.run(str(script))

        assert not work.exists()
        assert orch.progress["cleanup"].status == "completed"

    @pytest.mark.asyncio
    async def test_cleanup_after_install_failure(self, write_js, tmp_path, install, runner):
        install.side_effect = InstallError(["npm", "install"], 1)
        script = write_js("app.js", "require('left-pad');")
        work = tmp_path / "fresh"

        with pytest.raises(InstallError):
            await CleanRunOrchestrator(RunOptions(cwd=work, clean=True)).run(str(script))

        assert not work.exists()

    @pytest.mark.asyncio
    async def test_without_clean_artifacts_stay(self, write_js, tmp_path, install, runner):
        install.side_effect = _fake_install
        script = write_js("app.js", "require('left-pad');")
        work = tmp_path / "fresh"
        await CleanRunOrchestrator(RunOptions(cwd=work)).run(str(script))
        assert (work / "package.json").exists()
        assert (work / "node_modules" / "left-pad").is_dir()

    @pytest.mark.asyncio
    async def test_temp_workspace(self, write_js, install, runner):
        install.side_effect = _fake_install
        script = write_js("app.js", "require('left-pad');")

        output = await CleanRunOrchestrator(RunOptions(temp=True, clean=True)).run(str(script))

        assert output.workspace.root.name.startswith("cleanrun-")
        assert not output.workspace.root.exists()
        assert runner.call_args.kwargs["modules_dir"] == output.workspace.modules_dir
