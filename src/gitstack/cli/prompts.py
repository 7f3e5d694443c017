"""Interactive prompts built on click.

Ctrl-C or end-of-input at any prompt surfaces as UserCancelled so callers
discard whatever they had not committed yet.
"""

from collections.abc import Callable
from typing import TypeVar

import click

from gitstack.cli.output import user_output
from gitstack.core.create import CreatePrompter
from gitstack.core.errors import UserCancelled
from gitstack.core.navigate import NavPrompter
from gitstack.core.parents import ConflictResolution, ParentChange
from gitstack.core.track import TrackPrompter

T = TypeVar("T")


def prompt_or_cancel(ask: Callable[[], T]) -> T:
    try:
        return ask()
    except click.Abort:
        raise UserCancelled() from None


def confirm_or_cancel(message: str) -> bool:
    return prompt_or_cancel(lambda: click.confirm(message, default=False, err=True))


_CONFLICT_CHOICES = {
    "r": ConflictResolution.REPLACE,
    "s": ConflictResolution.SKIP,
    "a": ConflictResolution.ABORT,
}


def _choose_from(title: str, candidates: list[str], label: str) -> str:
    user_output(title)
    for index, candidate in enumerate(candidates, start=1):
        user_output(f"  {index}) {candidate}")
    choice = prompt_or_cancel(
        lambda: click.prompt(
            label,
            type=click.IntRange(1, len(candidates)),
            default=1,
            err=True,
        )
    )
    return candidates[choice - 1]


class ClickTrackPrompter(TrackPrompter):
    """Terminal prompter for parent selection and parent conflicts."""

    def choose_parent(self, branch: str, candidates: list[str]) -> str:
        return _choose_from(f"Select parent branch for '{branch}':", candidates, "Parent")

    def resolve_conflict(self, change: ParentChange) -> ConflictResolution:
        user_output(
            f"Parent conflict for '{change.branch}' "
            f"(existing: '{change.old_parent}', proposed: '{change.new_parent}')"
        )
        answer = prompt_or_cancel(
            lambda: click.prompt(
                "[r]eplace parent, [s]kip branch, [a]bort",
                type=click.Choice(sorted(_CONFLICT_CHOICES)),
                default="r",
                err=True,
            )
        )
        return _CONFLICT_CHOICES[answer]


class ClickCreatePrompter(CreatePrompter):
    def choose_parent(self, branch: str, candidates: list[str]) -> str:
        return _choose_from(f"Select parent branch for '{branch}':", candidates, "Parent")

    def choose_insert_target(self, candidates: list[str]) -> str:
        return _choose_from("Select child branch to insert before:", candidates, "Child")


class ClickNavPrompter(NavPrompter):
    def choose_child(self, branch: str, children: list[str]) -> str:
        return _choose_from(f"Select child branch of '{branch}':", children, "Child")
