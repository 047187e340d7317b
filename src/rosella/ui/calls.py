"""Repository call descriptors emitted by the dispatcher, and their execution."""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass
from enum import Enum

from typing_extensions import assert_never

from rosella.errors import RosellaError
from rosella.git.repository import Repository
from rosella.models import BranchEntry

logger = py_logging.getLogger(__name__)

NOT_A_REPOSITORY_MESSAGE = "Not a git repository"


class CallKind(str, Enum):
    LIST_BRANCHES = "list_branches"
    CHECKOUT = "checkout"
    CREATE_BRANCH = "create_branch"
    DELETE_BRANCH = "delete_branch"
    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    MERGE = "merge"
    REBASE = "rebase"


@dataclass(frozen=True)
class RepositoryCall:
    kind: CallKind
    name: str | None = None
    base: str | None = None
    force: bool = False
    set_upstream: bool = False
    token: int | None = None


@dataclass(frozen=True)
class CallOutcome:
    ok: bool
    branches: tuple[BranchEntry, ...] = ()
    error: str = ""

    @classmethod
    def success(cls, branches: tuple[BranchEntry, ...] = ()) -> CallOutcome:
        return cls(True, branches)

    @classmethod
    def failure(cls, error: str) -> CallOutcome:
        return cls(False, error=error)


def _required_name(call: RepositoryCall) -> str:
    if not call.name:
        raise ValueError(f"{call.kind.value} call requires a branch name")
    return call.name


async def perform(repository: Repository, call: RepositoryCall) -> CallOutcome:
    """Run ``call`` against ``repository`` and fold any failure into its text."""
    kind = call.kind
    try:
        if kind is CallKind.LIST_BRANCHES:
            if not await repository.is_repository():
                return CallOutcome.failure(NOT_A_REPOSITORY_MESSAGE)
            return CallOutcome.success(tuple(await repository.list_branches()))
        if kind is CallKind.CHECKOUT:
            await repository.checkout(_required_name(call))
        elif kind is CallKind.CREATE_BRANCH:
            await repository.create_branch(_required_name(call), call.base)
        elif kind is CallKind.DELETE_BRANCH:
            await repository.delete_branch(_required_name(call), call.force)
        elif kind is CallKind.FETCH:
            await repository.fetch()
        elif kind is CallKind.PULL:
            await repository.pull()
        elif kind is CallKind.PUSH:
            await repository.push(call.set_upstream)
        elif kind is CallKind.MERGE:
            await repository.merge(_required_name(call))
        elif kind is CallKind.REBASE:
            await repository.rebase(_required_name(call))
        else:
            assert_never(kind)
    except RosellaError as exc:
        logger.warning("Repository call failed kind=%s error=%s", kind.value, exc.message)
        return CallOutcome.failure(exc.message)
    return CallOutcome.success()
