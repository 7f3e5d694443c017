"""Unit tests for gh JSON parsing."""

import pytest

from gitstack.core.errors import ProviderError
from gitstack.core.github.parsing import (
    clean_gh_json_output,
    parse_pr_list,
    parse_pr_view,
    select_preferred_pr,
)
from gitstack.core.github.types import PRState, PullRequest

PR_LIST_JSON = """[
  {"number": 10, "state": "MERGED", "baseRefName": "main",
   "mergeCommit": {"oid": "abc123"}, "url": "https://github.com/o/r/pull/10"},
  {"number": 12, "state": "OPEN", "baseRefName": "feature-a",
   "mergeCommit": null, "url": "https://github.com/o/r/pull/12"},
  {"number": 11, "state": "CLOSED", "baseRefName": "main", "mergeCommit": null}
]"""


def _pr(number: int, state: PRState) -> PullRequest:
    return PullRequest(number=number, state=state, merge_commit_sha=None, base_branch="main")


def test_parse_pr_list() -> None:
    prs = parse_pr_list(PR_LIST_JSON, "--head feature-b")

    assert [(pr.number, pr.state) for pr in prs] == [
        (10, PRState.MERGED),
        (12, PRState.OPEN),
        (11, PRState.CLOSED),
    ]
    assert prs[0].merge_commit_sha == "abc123"
    assert prs[1].base_branch == "feature-a"
    assert prs[2].url is None


def test_parse_pr_view() -> None:
    pr = parse_pr_view(
        '{"number": 5, "state": "OPEN", "baseRefName": "main", "mergeCommit": null}', "PR #5"
    )

    assert pr == PullRequest(
        number=5, state=PRState.OPEN, merge_commit_sha=None, base_branch="main"
    )


def test_unknown_state_maps_to_unknown() -> None:
    pr = parse_pr_view('{"number": 5, "state": "DRAFTISH"}', "PR #5")

    assert pr.state == PRState.UNKNOWN
    assert pr.base_branch is None


def test_ansi_colour_is_stripped_before_parsing() -> None:
    colored = '\x1b[1;38m[\x1b[m{"number": 1, "state": "OPEN"}\x1b[1;38m]\x1b[m'

    [pr] = parse_pr_list(colored, "--head x")

    assert pr.number == 1


def test_clean_keeps_whitespace_and_drops_control_characters() -> None:
    assert clean_gh_json_output("a\x00b\n\tc\r") == "ab\n\tc\r"


def test_non_json_output_raises_provider_error() -> None:
    with pytest.raises(ProviderError, match="failed to parse gh PR list JSON for --head x"):
        parse_pr_list("Welcome to GitHub CLI!", "--head x")


def test_wrong_shape_raises_provider_error() -> None:
    with pytest.raises(ProviderError, match="failed to parse gh PR metadata JSON for PR #3"):
        parse_pr_view('{"state": "OPEN"}', "PR #3")


def test_select_prefers_highest_open() -> None:
    prs = [_pr(3, PRState.OPEN), _pr(9, PRState.MERGED), _pr(5, PRState.OPEN)]

    selected = select_preferred_pr(prs)

    assert selected is not None
    assert selected.number == 5


def test_select_falls_back_to_highest_overall() -> None:
    prs = [_pr(3, PRState.CLOSED), _pr(9, PRState.MERGED)]

    selected = select_preferred_pr(prs)

    assert selected is not None
    assert selected.number == 9


def test_select_empty_is_none() -> None:
    assert select_preferred_pr([]) is None
