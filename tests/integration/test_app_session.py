from __future__ import annotations

import asyncio
import contextlib
import os
from collections.abc import Callable, Iterator
from dataclasses import replace

import pytest

from rosella.app import BranchApp, CallCompleted, KeyPressed, Resized
from rosella.config import AppConfig
from rosella.errors import ExitCode, RosellaError
from rosella.models import BranchEntry
from rosella.ui.calls import CallKind, CallOutcome, RepositoryCall
from rosella.ui.keys import Key, KeyEvent
from rosella.ui.modal import ConfirmForceDelete, Idle


class FakeScreen:
    def __init__(self, columns: int = 80, rows: int = 24) -> None:
        self.columns = columns
        self.rows = rows
        self.frames: list[str] = []
        self.raw_entered = False
        self.raw_exited = False

    def size(self) -> tuple[int, int]:
        return self.columns, self.rows

    def write(self, text: str) -> None:
        self.frames.append(text)

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        self.raw_entered = True
        try:
            yield
        finally:
            self.raw_exited = True


class FakeRepository:
    path = "/tmp/demo"

    def __init__(self, names: list[str], *, unmerged: set[str] | None = None) -> None:
        self.names = list(names)
        self.unmerged = unmerged or set()
        self.deleted: list[tuple[str, bool]] = []

    async def is_repository(self) -> bool:
        return True

    async def list_branches(self) -> list[BranchEntry]:
        return [BranchEntry(name, is_current=index == 0) for index, name in enumerate(self.names)]

    async def delete_branch(self, name: str, force: bool = False) -> None:
        if name in self.unmerged and not force:
            raise RosellaError(f"Branch '{name}' is not fully merged.", code=ExitCode.GIT_ERROR)
        self.deleted.append((name, force))
        self.names.remove(name)

    async def checkout(self, name: str) -> None:
        raise AssertionError("not expected")

    async def create_branch(self, name: str, base: str | None = None) -> None:
        raise AssertionError("not expected")

    async def fetch(self) -> None:
        raise RosellaError("fatal: unable to access: Could not resolve host: example.com")

    async def pull(self) -> None:
        raise AssertionError("not expected")

    async def push(self, set_upstream: bool = False) -> None:
        raise AssertionError("not expected")

    async def merge(self, name: str) -> None:
        raise AssertionError("not expected")

    async def rebase(self, name: str) -> None:
        raise AssertionError("not expected")


async def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def pipe() -> Iterator[tuple[int, int]]:
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        with contextlib.suppress(OSError):
            os.close(fd)


def test_delete_with_escalation_then_quit(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    repository = FakeRepository(["main", "feature-1", "feature-2"], unmerged={"feature-1"})
    screen = FakeScreen()

    async def scenario() -> int:
        app = BranchApp(repository, screen, input_fd=read_fd, config=AppConfig())
        task = asyncio.create_task(app.run())

        await _wait_for(lambda: app.state.store.loaded)
        assert "line 1 of 3" in screen.frames[-1]

        os.write(write_fd, b"j\x1b[3~y")
        await _wait_for(lambda: isinstance(app.state.modal, ConfirmForceDelete))
        assert "is not fully merged. Force delete?" in screen.frames[-1]

        os.write(write_fd, b"y")
        await _wait_for(lambda: len(app.state.store.items) == 2 and not app.state.loading)
        assert app.state.message == "Force deleted branch 'feature-1'"

        os.write(write_fd, b"qy")
        return await asyncio.wait_for(task, 5)

    assert asyncio.run(scenario()) == 0
    assert repository.deleted == [("feature-1", True)]
    assert screen.raw_entered and screen.raw_exited


def test_remote_failure_shows_error_pane_until_dismissed(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    screen = FakeScreen()

    async def scenario() -> int:
        app = BranchApp(FakeRepository(["main"]), screen, input_fd=read_fd)
        task = asyncio.create_task(app.run())
        await _wait_for(lambda: app.state.store.loaded)

        os.write(write_fd, b"f")
        await _wait_for(lambda: "Network error" in screen.frames[-1])
        assert "Press any key to dismiss" in screen.frames[-1]

        os.write(write_fd, b" ")
        await _wait_for(lambda: app.state.modal == Idle())

        os.close(write_fd)
        return await asyncio.wait_for(task, 5)

    assert asyncio.run(scenario()) == 0


def test_process_applies_events_without_a_terminal() -> None:
    screen = FakeScreen(rows=12)

    async def scenario() -> BranchApp:
        app = BranchApp(FakeRepository(["main", "dev"]), screen, input_fd=-1)
        listing = RepositoryCall(CallKind.LIST_BRANCHES, token=1)
        app.state = replace(app.state, store=app.state.store.issue_token()[0])
        app.process(
            CallCompleted(
                listing,
                CallOutcome.success((BranchEntry("main", is_current=True), BranchEntry("dev"))),
            )
        )
        app.process(KeyPressed(KeyEvent(Key.DOWN)))
        app.process(Resized(100, 30))
        return app

    app = asyncio.run(scenario())
    assert app.state.selected_entry.name == "dev"
    assert app.state.viewport.height == 23
    assert (app.columns, app.rows) == (100, 30)
