"""Event loop driving the branch controller."""

from __future__ import annotations

import asyncio
import contextlib
import logging as py_logging
import os
import signal
from collections.abc import Iterator
from dataclasses import dataclass, replace
from typing import Protocol, Union

from rosella.config import AppConfig
from rosella.git.repository import Repository
from rosella.terminal.input import KeyDecoder
from rosella.ui import dispatcher
from rosella.ui.calls import CallOutcome, RepositoryCall, perform
from rosella.ui.keys import KeyEvent
from rosella.ui.render import render_screen
from rosella.ui.state import AppState, initial_state
from rosella.ui.view_model import build_view_model

logger = py_logging.getLogger(__name__)

_READ_CHUNK = 1024


class Screen(Protocol):
    def size(self) -> tuple[int, int]: ...

    def write(self, text: str) -> None: ...

    def raw_mode(self) -> contextlib.AbstractContextManager[None]: ...


@dataclass(frozen=True)
class KeyPressed:
    event: KeyEvent


@dataclass(frozen=True)
class Resized:
    columns: int
    rows: int


@dataclass(frozen=True)
class CallCompleted:
    call: RepositoryCall
    outcome: CallOutcome


@dataclass(frozen=True)
class InputClosed:
    pass


AppEvent = Union[KeyPressed, Resized, CallCompleted, InputClosed]


class BranchApp:
    """Single-threaded asyncio loop: one event is applied fully before the next.

    Keys, resizes and call completions all arrive through one queue. Calls
    emitted by the dispatcher run as tasks; in-flight calls are never
    cancelled while the app runs, stale listings are discarded by token.
    """

    def __init__(
        self,
        repository: Repository,
        screen: Screen,
        *,
        input_fd: int,
        config: AppConfig | None = None,
        title: str = "Rosella",
    ) -> None:
        self.repository = repository
        self.screen = screen
        self.input_fd = input_fd
        self.config = config or AppConfig()
        self.title = title
        self.columns, self.rows = screen.size()
        self.state: AppState = initial_state(
            self.rows,
            pattern_search_key=self.config.pattern_search_key,
            selection_policy=self.config.selection_policy,
        )
        self._decoder = KeyDecoder()
        self._queue: asyncio.Queue[AppEvent] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    def process(self, event: AppEvent) -> dispatcher.Transition | None:
        """Apply one event to the state; returns the transition, if any."""
        if isinstance(event, KeyPressed):
            transition = dispatcher.handle(event.event, self.state)
        elif isinstance(event, CallCompleted):
            transition = dispatcher.complete(event.call, event.outcome, self.state)
        elif isinstance(event, Resized):
            self.columns, self.rows = event.columns, event.rows
            self.state = dispatcher.resize(self.state, event.rows)
            return None
        else:
            logger.info("Input closed; leaving")
            self.state = replace(self.state, should_exit=True)
            return None
        self._apply(transition)
        return transition

    def _apply(self, transition: dispatcher.Transition) -> None:
        self.state = transition.state
        if transition.call is not None:
            self._spawn(transition.call)

    def _spawn(self, call: RepositoryCall) -> None:
        task = asyncio.get_running_loop().create_task(self._run_call(call))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_call(self, call: RepositoryCall) -> None:
        try:
            outcome = await perform(self.repository, call)
        except Exception as exc:
            logger.exception("Unexpected repository failure kind=%s", call.kind.value)
            outcome = CallOutcome.failure(str(exc) or type(exc).__name__)
        self._post(CallCompleted(call, outcome))

    def _post(self, event: AppEvent) -> None:
        if self._queue is not None:
            self._queue.put_nowait(event)

    def _on_input(self) -> None:
        try:
            data = os.read(self.input_fd, _READ_CHUNK)
        except BlockingIOError:
            return
        if not data:
            self._post(InputClosed())
            return
        for event in self._decoder.feed(data):
            self._post(KeyPressed(event))

    def _on_resize(self) -> None:
        columns, rows = self.screen.size()
        self._post(Resized(columns, rows))

    def render(self) -> None:
        vm = build_view_model(self.state, self.columns, self.rows)
        self.screen.write(render_screen(vm, self.columns, self.rows, title=self.title))

    @contextlib.contextmanager
    def _event_sources(self, loop: asyncio.AbstractEventLoop) -> Iterator[None]:
        loop.add_reader(self.input_fd, self._on_input)
        resize_signal = getattr(signal, "SIGWINCH", None)
        if resize_signal is not None:
            loop.add_signal_handler(resize_signal, self._on_resize)
        try:
            yield
        finally:
            loop.remove_reader(self.input_fd)
            if resize_signal is not None:
                loop.remove_signal_handler(resize_signal)

    async def run(self) -> int:
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        logger.info("Starting branch controller repo=%s", getattr(self.repository, "path", ""))
        with self.screen.raw_mode(), self._event_sources(loop):
            try:
                self._apply(dispatcher.start(self.state))
                self.render()
                while not self.state.should_exit:
                    event = await self._queue.get()
                    self.process(event)
                    if not self.state.should_exit:
                        self.render()
            finally:
                for task in list(self._tasks):
                    task.cancel()
                if self._tasks:
                    await asyncio.gather(*self._tasks, return_exceptions=True)
                self._queue = None
        logger.info("Branch controller stopped")
        return 0
