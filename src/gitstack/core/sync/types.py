"""Sync plan operations and outcomes."""

from dataclasses import dataclass, field
from typing import Any, assert_never

from gitstack.core.github.types import PRState


@dataclass(frozen=True)
class FetchOp:
    remote: str


@dataclass(frozen=True)
class UpdatePrCacheOp:
    branch: str
    number: int
    state: PRState


@dataclass(frozen=True)
class UpdateShaOp:
    branch: str
    sha: str


@dataclass(frozen=True)
class RestackOp:
    branch: str
    onto: str
    reason: str


SyncOp = FetchOp | UpdatePrCacheOp | UpdateShaOp | RestackOp


def describe_op(op: SyncOp) -> dict[str, Any]:
    """Flatten an op into the kind/branch/onto/details shape used for display."""
    match op:
        case FetchOp(remote=remote):
            return {"kind": "fetch", "branch": remote, "onto": None, "details": f"fetch {remote}"}
        case UpdatePrCacheOp(branch=branch, number=number, state=state):
            return {
                "kind": "update_pr_cache",
                "branch": branch,
                "onto": None,
                "details": f"pr #{number} {state.value}",
            }
        case UpdateShaOp(branch=branch, sha=sha):
            return {"kind": "update_sha", "branch": branch, "onto": None, "details": sha}
        case RestackOp(branch=branch, onto=onto, reason=reason):
            return {
                "kind": "restack",
                "branch": branch,
                "onto": onto,
                "details": f"onto {onto}: {reason}",
            }
        case _:
            assert_never(op)


@dataclass(frozen=True)
class SyncPlan:
    base_branch: str
    ops: list[SyncOp]
    warnings: list[str] = field(default_factory=list)

    @property
    def restacks(self) -> list[RestackOp]:
        return [op for op in self.ops if isinstance(op, RestackOp)]


@dataclass(frozen=True)
class SyncOutcome:
    run_id: int
    restacked: list[str]
    warnings: list[str]
