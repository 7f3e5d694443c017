"""Parsing helpers for gh CLI JSON output."""

import re

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from gitstack.core.errors import ProviderError
from gitstack.core.github.types import PRState, PullRequest

# Fields requested from `gh pr list` / `gh pr view`
PR_JSON_FIELDS = "number,state,mergeCommit,baseRefName,url"

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


class GhMergeCommit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    oid: str


class GhPullRequest(BaseModel):
    """Subset of gh's PR JSON used by the stack."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    number: int
    state: str
    base_ref_name: str | None = Field(default=None, alias="baseRefName")
    merge_commit: GhMergeCommit | None = Field(default=None, alias="mergeCommit")
    url: str | None = None

    def to_pull_request(self) -> PullRequest:
        return PullRequest(
            number=self.number,
            state=PRState.from_gh(self.state),
            merge_commit_sha=self.merge_commit.oid if self.merge_commit is not None else None,
            base_branch=self.base_ref_name,
            url=self.url,
        )


_PR_LIST_ADAPTER = TypeAdapter(list[GhPullRequest])


def clean_gh_json_output(raw: str) -> str:
    """Strip ANSI escape sequences and stray control characters from gh output.

    gh may colourise JSON when it believes it is writing to a terminal; newlines,
    carriage returns and tabs are preserved.
    """
    without_ansi = _ANSI_ESCAPE.sub("", raw)
    return "".join(ch for ch in without_ansi if ch in "\n\r\t" or ch.isprintable())


def _validation_detail(error: ValidationError) -> str:
    first = error.errors()[0]
    return str(first.get("msg", error))


def parse_pr_list(raw: str, context: str) -> list[PullRequest]:
    """Parse the JSON array printed by `gh pr list --json ...`."""
    cleaned = clean_gh_json_output(raw)
    try:
        prs = _PR_LIST_ADAPTER.validate_json(cleaned)
    except ValidationError as e:
        raise ProviderError(
            f"failed to parse gh PR list JSON for {context}: {_validation_detail(e)}"
        ) from e
    return [pr.to_pull_request() for pr in prs]


def parse_pr_view(raw: str, context: str) -> PullRequest:
    """Parse the JSON object printed by `gh pr view --json ...`."""
    cleaned = clean_gh_json_output(raw)
    try:
        pr = GhPullRequest.model_validate_json(cleaned)
    except ValidationError as e:
        raise ProviderError(
            f"failed to parse gh PR metadata JSON for {context}: {_validation_detail(e)}"
        ) from e
    return pr.to_pull_request()


def select_preferred_pr(prs: list[PullRequest]) -> PullRequest | None:
    """Pick the highest-numbered open PR, else the highest-numbered PR overall."""
    if not prs:
        return None
    open_prs = [pr for pr in prs if pr.state == PRState.OPEN]
    if open_prs:
        return max(open_prs, key=lambda pr: pr.number)
    return max(prs, key=lambda pr: pr.number)
