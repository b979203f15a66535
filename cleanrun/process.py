"""Child process helpers for the installer (npm) and runner (node)."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable
from pathlib import Path

import structlog

from cleanrun.exceptions import InstallError, ProcessError, RunError
from cleanrun.scanner.install_set import install_command

log = structlog.get_logger("cleanrun.process")


async def spawn(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    stdin: str | None = None,
    silent: bool = False,
) -> int:
    """Run *cmd* to completion and return its exit status.

    Output streams are inherited from this process, or discarded entirely
    when *silent* is set. *stdin* text, if given, is written to the child and
    the stream closed; otherwise the child inherits stdin.

    A negative status means the child was killed by that signal.
    Raises ``OSError`` if the executable cannot be started.
    """
    output = asyncio.subprocess.DEVNULL if silent else None
    log.debug("process.spawn", cmd=cmd, cwd=str(cwd) if cwd else None, silent=silent)
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        env=env,
        stdin=asyncio.subprocess.PIPE if stdin is not None else None,
        stdout=output,
        stderr=output,
    )
    await proc.communicate(stdin.encode() if stdin is not None else None)
    log.debug("process.exit", cmd=cmd[0], returncode=proc.returncode)
    return proc.returncode  # type: ignore[return-value]


async def _checked(
    error_cls: type[ProcessError],
    cmd: list[str],
    **kwargs,
) -> None:
    try:
        returncode = await spawn(cmd, **kwargs)
    except OSError as e:
        raise error_cls(cmd, None, reason=e.strerror or str(e)) from e
    if returncode != 0:
        raise error_cls(cmd, returncode)


async def install_packages(
    packages: Iterable[str],
    cwd: Path,
    *,
    npm: str = "npm",
    silent: bool = False,
) -> None:
    """Install *packages* into ``<cwd>/node_modules`` without saving them.

    Raises ``InstallError`` on non-zero exit, signal, or missing npm.
    """
    cmd = install_command(packages, npm=npm)
    log.info("process.install", packages=cmd[4:], cwd=str(cwd))
    await _checked(InstallError, cmd, cwd=cwd, silent=silent)


async def run_script(
    args: list[str],
    *,
    modules_dir: Path,
    node: str = "node",
    stdin: str | None = None,
) -> None:
    """Run ``node <args...>`` with module lookup pointed at *modules_dir*.

    Raises ``RunError`` carrying the script's exit status on failure.
    """
    env = {**os.environ, "NODE_PATH": str(modules_dir)}
    await _checked(RunError, [node, *args], env=env, stdin=stdin)
