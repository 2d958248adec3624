"""Presence checks and installers for the external media tools.

Each probe is recomputed on every call.  Version strings are cut to the first
line of the tool's output and capped at ``VERSION_MAX_LENGTH`` characters so
they fit the status panel.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from core.errors import DependencyError

logger = logging.getLogger(__name__)

VERSION_MAX_LENGTH = 50
VERSION_TIMEOUT = 5.0

WRAPPER_NAME = "wrapper"
WRAPPER_HOST = "127.0.0.1"
WRAPPER_PORT = 10020
WRAPPER_CONNECT_TIMEOUT = 2.0
WRAPPER_GUIDANCE = "Please start the wrapper service manually. See: https://github.com/zhaarey/wrapper"

# At least this many of the shared libraries must sit next to the app for a
# library-only ffmpeg install to count.
FFMPEG_MIN_LIBRARIES = 3
FFMPEG_LIBRARY_PREFIXES = ("avcodec-", "avformat-", "avutil-", "swresample-")


class DependencyStatus(BaseModel):
    """Result of probing one dependency."""

    installed: bool
    version: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class Tool:
    """An external executable the downloader relies on."""

    name: str
    binary: str
    version_flag: str
    package: str | None
    guidance: str


TOOLS: dict[str, Tool] = {
    "mp4box": Tool(
        name="mp4box",
        binary="MP4Box",
        version_flag="-version",
        package="gpac",
        guidance="please download MP4Box from https://gpac.io/downloads/gpac-nightly-builds/ and add to PATH",
    ),
    "mp4decrypt": Tool(
        name="mp4decrypt",
        binary="mp4decrypt",
        version_flag="--version",
        package=None,
        guidance="please download mp4decrypt from https://www.bento4.com/downloads/ and add to PATH",
    ),
    "ffmpeg": Tool(
        name="ffmpeg",
        binary="ffmpeg",
        version_flag="-version",
        package="ffmpeg",
        guidance="please download FFmpeg from https://ffmpeg.org/download.html and add to PATH",
    ),
}


def truncate_version(text: str, limit: int = VERSION_MAX_LENGTH) -> str:
    """Return ``text`` cut to ``limit`` characters plus ``...`` when longer."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def first_line(output: str) -> str:
    """Return the first line of ``output``, stripped."""
    lines = output.splitlines()
    return lines[0].strip() if lines else ""


def locate_tool(binary: str, search_dir: Path | None = None) -> str | None:
    """Find ``binary`` in ``search_dir`` (default: cwd) or on ``PATH``.

    Parameters
    ----------
    binary : str
        Executable name without extension.
    search_dir : Path | None
        Directory checked before ``PATH``.

    Returns
    -------
    str | None
        Path to the executable, or ``None`` when it cannot be found.

    """
    base = search_dir or Path.cwd()
    names = [f"{binary}.exe", binary] if sys.platform == "win32" else [binary]
    for name in names:
        candidate = base / name
        if candidate.is_file():
            return str(candidate)
    return shutil.which(binary)


async def read_version(path: str, flag: str, timeout: float = VERSION_TIMEOUT) -> str | None:
    """Run ``path flag`` and return the truncated first line of its output.

    Returns ``None`` when the tool cannot be executed, exits non-zero or
    does not answer within ``timeout`` seconds.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            path,
            flag,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as exc:
        logger.debug("Could not execute %s: %s", path, exc)
        return None

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        logger.debug("Version query timed out", extra={"path": path})
        return None

    if proc.returncode != 0:
        return None
    line = first_line(stdout.decode(errors="replace"))
    return truncate_version(line) if line else None


def _ffmpeg_libraries(search_dir: Path) -> list[str]:
    if not search_dir.is_dir():
        return []
    return sorted(
        entry.name
        for entry in search_dir.iterdir()
        if entry.is_file() and entry.name.startswith(FFMPEG_LIBRARY_PREFIXES)
    )


async def probe_tool(tool: Tool, search_dir: Path | None = None, timeout: float = VERSION_TIMEOUT) -> DependencyStatus:
    """Probe one external executable."""
    base = search_dir or Path.cwd()
    path = locate_tool(tool.binary, base)
    if path is None:
        if tool.name == "ffmpeg":
            libraries = _ffmpeg_libraries(base)
            if len(libraries) >= FFMPEG_MIN_LIBRARIES:
                return DependencyStatus(installed=True, version="DLLs only", path=", ".join(libraries))
        return DependencyStatus(installed=False)

    version = await read_version(path, tool.version_flag, timeout=timeout)
    return DependencyStatus(installed=True, version=version, path=path)


async def probe_wrapper(
    host: str = WRAPPER_HOST,
    port: int = WRAPPER_PORT,
    timeout: float = WRAPPER_CONNECT_TIMEOUT,
) -> DependencyStatus:
    """Check whether the wrapper service accepts TCP connections.

    The connect attempt is bounded by ``timeout`` so a health check never hangs.
    """
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (OSError, TimeoutError) as exc:
        logger.debug("Wrapper service not reachable at %s:%d: %s", host, port, exc)
        return DependencyStatus(installed=False)

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        logger.debug("Error closing wrapper probe connection", exc_info=True)
    return DependencyStatus(installed=True, version="Running")


async def check_all(
    *,
    search_dir: Path | None = None,
    wrapper_host: str = WRAPPER_HOST,
    wrapper_port: int = WRAPPER_PORT,
    wrapper_timeout: float = WRAPPER_CONNECT_TIMEOUT,
    version_timeout: float = VERSION_TIMEOUT,
) -> dict[str, DependencyStatus]:
    """Probe every tool and the wrapper service concurrently."""
    names = list(TOOLS)
    results = await asyncio.gather(
        *(probe_tool(TOOLS[name], search_dir, version_timeout) for name in names),
        probe_wrapper(wrapper_host, wrapper_port, wrapper_timeout),
    )
    statuses = dict(zip([*names, WRAPPER_NAME], results, strict=True))
    logger.debug(
        "Dependency check finished",
        extra={"installed": [name for name, st in statuses.items() if st.installed]},
    )
    return statuses


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------


def _normalize_platform(platform: str) -> str:
    if platform.startswith("linux"):
        return "linux"
    if platform == "darwin":
        return "darwin"
    if platform in ("win32", "cygwin", "windows"):
        return "windows"
    return platform


def install_plan(name: str, platform: str | None = None) -> list[list[str]]:
    """Return the package-manager commands that install ``name`` on ``platform``.

    Parameters
    ----------
    name : str
        Dependency name (``mp4box``, ``mp4decrypt`` or ``ffmpeg``).
    platform : str | None
        ``sys.platform``-style identifier (default: the running platform).

    Returns
    -------
    list[list[str]]
        Commands to run in order.

    Raises
    ------
    DependencyError
        If the dependency is unknown, the platform is unsupported or there is
        no automated install path (the message then carries the manual steps).

    """
    tool = TOOLS.get(name)
    if tool is None:
        msg = f"unknown dependency: {name}"
        raise DependencyError(msg)

    os_name = _normalize_platform(platform or sys.platform)
    if os_name not in ("linux", "darwin", "windows"):
        msg = f"unsupported OS: {os_name}"
        raise DependencyError(msg)
    if os_name == "windows" or tool.package is None:
        raise DependencyError(tool.guidance)

    if os_name == "linux":
        return [["apt-get", "update"], ["apt-get", "install", "-y", tool.package]]
    return [["brew", "install", tool.package]]


async def run_command(command: list[str]) -> None:
    """Run ``command`` and raise ``DependencyError`` if it fails.

    The error message keeps the command's own stderr verbatim.
    """
    logger.info("Running %s", " ".join(command))
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        msg = f"{' '.join(command)}: {exc}"
        raise DependencyError(msg, command=command) from exc

    stdout, stderr = await proc.communicate()
    if stdout:
        logger.debug("%s stdout: %s", command[0], stdout.decode(errors="replace"))
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        msg = f"{' '.join(command)} exited with status {proc.returncode}"
        if detail:
            msg = f"{msg}: {detail}"
        raise DependencyError(msg, command=command)


async def install_dependency(name: str, platform: str | None = None) -> None:
    """Install ``name`` with the platform package manager.

    Raises
    ------
    DependencyError
        If no automated path exists or any install command fails.

    """
    for command in install_plan(name, platform):
        await run_command(command)
    logger.info("Installed dependency %s", name)


async def wrapper_start_status(
    host: str = WRAPPER_HOST,
    port: int = WRAPPER_PORT,
    timeout: float = WRAPPER_CONNECT_TIMEOUT,
) -> DependencyStatus:
    """Return the wrapper status, raising with start-up guidance when it is down."""
    status = await probe_wrapper(host, port, timeout)
    if not status.installed:
        raise DependencyError(WRAPPER_GUIDANCE)
    return status
