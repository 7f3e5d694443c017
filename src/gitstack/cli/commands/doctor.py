"""Doctor command: report and optionally repair stack inconsistencies."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import machine_output
from gitstack.core.context import StackContext
from gitstack.core.doctor import run_doctor


@click.command("doctor")
@click.option("--fix", is_flag=True, help="Apply repairs for the issues found.")
@format_option
@stack_error_boundary
@click.pass_obj
def doctor_cmd(ctx: StackContext, fix: bool, format: str) -> None:
    """Check the stored stack against git and its own invariants."""
    repo = ctx.require_repo()
    report = run_doctor(repo.store, ctx.git, repo.root, fix=fix)

    if format == "json":
        emit_json(
            {
                "issues": report.issues,
                "fix_applied": fix,
                "fixes": report.fixes_applied,
            }
        )
        return

    if not report.issues:
        machine_output("doctor: no issues found")
    else:
        machine_output(f"doctor: {len(report.issues)} issue(s)")
        for issue in report.issues:
            machine_output(f"- [{issue.severity.value}] {issue.code}: {issue.message}")
    for applied in report.fixes_applied:
        machine_output(f"fixed: {applied}")
