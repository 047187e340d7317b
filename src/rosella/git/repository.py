"""Async git repository adapter."""

from __future__ import annotations

import asyncio
import logging as py_logging
import os
import re
import subprocess
from pathlib import Path
from typing import Protocol

from rosella.errors import ExitCode, RosellaError
from rosella.git.failures import is_not_fully_merged
from rosella.logging import truncate_log
from rosella.models import BranchEntry

logger = py_logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT_SECONDS = 120.0
DEFAULT_REMOTE = "origin"
NO_UPSTREAM_MESSAGE = "NO_UPSTREAM: The current branch has no upstream branch."

_FIELD_SEPARATOR = "\t"
_BRANCH_FORMAT = _FIELD_SEPARATOR.join(
    ["%(HEAD)", "%(refname:short)", "%(objectname:short)", "%(upstream:track,nobracket)"]
)
_AHEAD_PATTERN = re.compile(r"ahead (\d+)")
_BEHIND_PATTERN = re.compile(r"behind (\d+)")
_PRIMARY_BRANCHES = ("main", "master")


class SubprocessRunner(Protocol):
    def __call__(
        self,
        args: list[str],
        *,
        capture_output: bool = False,
        text: bool = False,
        check: bool = False,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[str]: ...


class Repository(Protocol):
    async def list_branches(self) -> list[BranchEntry]: ...

    async def is_repository(self) -> bool: ...

    async def checkout(self, name: str) -> None: ...

    async def create_branch(self, name: str, base: str | None = None) -> None: ...

    async def delete_branch(self, name: str, force: bool = False) -> None: ...

    async def fetch(self) -> None: ...

    async def pull(self) -> None: ...

    async def push(self, set_upstream: bool = False) -> None: ...

    async def merge(self, name: str) -> None: ...

    async def rebase(self, name: str) -> None: ...


def parse_track(track: str) -> tuple[int | None, int | None]:
    """Parse ``%(upstream:track,nobracket)`` output into ahead/behind counts.

    Branches without an upstream (or with a gone upstream) report ``None`` for
    both counts; an in-sync upstream reports zeros.
    """
    track = track.strip()
    if track == "gone":
        return None, None
    ahead_match = _AHEAD_PATTERN.search(track)
    behind_match = _BEHIND_PATTERN.search(track)
    ahead = int(ahead_match.group(1)) if ahead_match else 0
    behind = int(behind_match.group(1)) if behind_match else 0
    return ahead, behind


def parse_branch_listing(output: str) -> list[BranchEntry]:
    entries: list[BranchEntry] = []
    seen: set[str] = set()
    for raw_line in output.splitlines():
        if not raw_line.strip():
            continue
        fields = raw_line.split(_FIELD_SEPARATOR)
        while len(fields) < 4:
            fields.append("")
        head, name, commit, track = fields[:4]
        name = name.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        has_upstream = bool(track.strip())
        ahead, behind = parse_track(track) if has_upstream else (None, None)
        entries.append(
            BranchEntry(
                name=name,
                is_current=head.strip() == "*",
                short_commit=commit.strip(),
                ahead_count=ahead,
                behind_count=behind,
            )
        )
    return entries


def sort_branches(entries: list[BranchEntry]) -> list[BranchEntry]:
    """Current branch first, then main/master, then the rest alphabetically."""

    def _rank(entry: BranchEntry) -> tuple[int, str]:
        if entry.is_current:
            return 0, entry.name
        if entry.name in _PRIMARY_BRANCHES:
            return 1, entry.name
        return 2, entry.name.lower()

    return sorted(entries, key=_rank)


class GitRepository:
    """Runs git against one working tree; every public method is a coroutine."""

    def __init__(
        self,
        path: str | Path,
        *,
        runner: SubprocessRunner = subprocess.run,
        timeout_seconds: float = DEFAULT_GIT_TIMEOUT_SECONDS,
        fetch_prune: bool = True,
        remote: str = DEFAULT_REMOTE,
    ) -> None:
        self.path = Path(path).expanduser()
        self.runner = runner
        self.timeout_seconds = timeout_seconds
        self.fetch_prune = fetch_prune
        self.remote = remote

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    def _run_git(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        cmd = ["git", "-C", str(self.path), *args]
        logger.debug("Running git command repo=%s args=%s", self.path, args)
        try:
            result = self.runner(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env=self._env(),
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning("Git command timed out repo=%s args=%s", self.path, args)
            raise RosellaError(
                f"git {args[0]} timed out after {self.timeout_seconds:g}s",
                code=ExitCode.GIT_ERROR,
            ) from exc
        except OSError as exc:
            logger.error("Git executable could not be started repo=%s error=%s", self.path, exc)
            raise RosellaError(
                f"Unable to run git: {exc}",
                code=ExitCode.GIT_ERROR,
                hint="Install git and make sure it is on PATH.",
            ) from exc
        if result.returncode != 0:
            logger.debug(
                "Git command failed repo=%s args=%s code=%s stderr=%s",
                self.path,
                args,
                result.returncode,
                truncate_log(result.stderr or ""),
            )
        return result

    def _check(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        result = self._run_git(args)
        if result.returncode != 0:
            raise RosellaError(_failure_text(args, result), code=ExitCode.GIT_ERROR)
        return result

    def _is_repository(self) -> bool:
        try:
            result = self._run_git(["rev-parse", "--is-inside-work-tree"])
        except RosellaError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def _list_branches(self) -> list[BranchEntry]:
        listing = self._run_git(["for-each-ref", "refs/heads", f"--format={_BRANCH_FORMAT}"])
        if listing.returncode != 0:
            logger.error(
                "Failed to list local branches repo=%s stderr=%s",
                self.path,
                truncate_log(listing.stderr or ""),
            )
            raise RosellaError(
                f"Failed to list branches: {_failure_text(['for-each-ref'], listing)}",
                code=ExitCode.GIT_ERROR,
            )
        entries = parse_branch_listing(listing.stdout)
        current = next((entry for entry in entries if entry.is_current), None)
        if current is not None:
            status = self._run_git(["status", "--porcelain"])
            if status.returncode == 0 and status.stdout.strip():
                entries = [
                    BranchEntry(
                        name=entry.name,
                        is_current=entry.is_current,
                        short_commit=entry.short_commit,
                        ahead_count=entry.ahead_count,
                        behind_count=entry.behind_count,
                        has_uncommitted_changes=entry.is_current,
                    )
                    for entry in entries
                ]
        sorted_entries = sort_branches(entries)
        logger.debug("Discovered %s local branches repo=%s", len(sorted_entries), self.path)
        return sorted_entries

    def _checkout(self, name: str) -> None:
        self._check(["checkout", name])

    def _create_branch(self, name: str, base: str | None) -> None:
        args = ["branch", name]
        if base:
            args.append(base)
        result = self._run_git(args)
        if result.returncode == 0:
            return
        text = _failure_text(args, result)
        if "already exists" in text:
            raise RosellaError(f"Branch '{name}' already exists", code=ExitCode.GIT_ERROR)
        raise RosellaError(text, code=ExitCode.GIT_ERROR)

    def _delete_branch(self, name: str, force: bool) -> None:
        args = ["branch", "-D" if force else "-d", name]
        result = self._run_git(args)
        if result.returncode == 0:
            return
        text = _failure_text(args, result)
        if not force and is_not_fully_merged(text):
            raise RosellaError(f"Branch '{name}' is not fully merged.", code=ExitCode.GIT_ERROR)
        raise RosellaError(text, code=ExitCode.GIT_ERROR)

    def _fetch(self) -> None:
        args = ["fetch", "--all"]
        if self.fetch_prune:
            args.append("--prune")
        self._check(args)

    def _pull(self) -> None:
        self._check(["pull"])

    def _current_branch(self) -> str:
        result = self._run_git(["symbolic-ref", "--short", "-q", "HEAD"])
        name = result.stdout.strip() if result.returncode == 0 else ""
        if not name:
            raise RosellaError(
                "Cannot push from a detached HEAD",
                code=ExitCode.GIT_ERROR,
                hint="Check out a branch first.",
            )
        return name

    def _push(self, set_upstream: bool) -> None:
        if set_upstream:
            self._check(["push", "--set-upstream", self.remote, self._current_branch()])
            return
        upstream = self._run_git(
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"]
        )
        if upstream.returncode != 0:
            raise RosellaError(NO_UPSTREAM_MESSAGE, code=ExitCode.GIT_ERROR)
        self._check(["push"])

    def _merge(self, name: str) -> None:
        self._check(["merge", name])

    def _rebase(self, name: str) -> None:
        self._check(["rebase", name])

    async def is_repository(self) -> bool:
        return await asyncio.to_thread(self._is_repository)

    async def list_branches(self) -> list[BranchEntry]:
        return await asyncio.to_thread(self._list_branches)

    async def checkout(self, name: str) -> None:
        await asyncio.to_thread(self._checkout, name)

    async def create_branch(self, name: str, base: str | None = None) -> None:
        await asyncio.to_thread(self._create_branch, name, base)

    async def delete_branch(self, name: str, force: bool = False) -> None:
        await asyncio.to_thread(self._delete_branch, name, force)

    async def fetch(self) -> None:
        await asyncio.to_thread(self._fetch)

    async def pull(self) -> None:
        await asyncio.to_thread(self._pull)

    async def push(self, set_upstream: bool = False) -> None:
        await asyncio.to_thread(self._push, set_upstream)

    async def merge(self, name: str) -> None:
        await asyncio.to_thread(self._merge, name)

    async def rebase(self, name: str) -> None:
        await asyncio.to_thread(self._rebase, name)


def _failure_text(args: list[str], result: subprocess.CompletedProcess[str]) -> str:
    parts = [text.strip() for text in (result.stderr or "", result.stdout or "") if text.strip()]
    if parts:
        return "\n".join(parts)
    return f"git {args[0]} failed with exit code {result.returncode}"
