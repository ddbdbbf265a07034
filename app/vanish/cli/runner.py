"""Drive an operation pipeline from the command line.

Shows the plan, asks for confirmation with ``typer.confirm`` and prints
the final summary. Exits with code 1 on a fatal error or when any item
was skipped.
"""

import typer

from vanish.cli.display import print_delete_plan, print_restore_plan, print_summary
from vanish.core.config import VanishConfig
from vanish.engine.pipeline import Operation, Pipeline, PipelineState


def get_config(ctx: typer.Context) -> VanishConfig:
    """Return the configuration loaded by the main callback."""
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        config = VanishConfig()
        obj["config"] = config
    return config


def is_quiet(ctx: typer.Context) -> bool:
    """Return whether ``--quiet`` was given."""
    return bool(ctx.ensure_object(dict).get("quiet", False))


def _confirm(pipeline: Pipeline) -> bool:
    if pipeline.operation is Operation.DELETE:
        print_delete_plan(pipeline.pending_valid)
        prompt = f"Move {pipeline.total} item(s) to cache?"
    else:
        print_restore_plan(pipeline.candidates)
        prompt = f"Restore {pipeline.total} item(s)?"
    return typer.confirm(prompt, default=False)


def run_pipeline(pipeline: Pipeline, quiet: bool = False) -> None:
    """Run a pipeline to completion and report the outcome.

    Args:
        pipeline: Pipeline to run.
        quiet: Suppress non-essential output.

    Raises:
        typer.Exit: With code 1 on error or when any item was skipped.
    """
    pipeline.run(confirm=_confirm)
    summary = pipeline.summary()
    print_summary(summary, quiet=quiet)

    if summary.state is PipelineState.ERROR or summary.skipped_count:
        raise typer.Exit(code=1)


def run_operation(
    ctx: typer.Context,
    operation: Operation,
    targets: list[str] | None = None,
    *,
    purge_days: int | None = None,
    yes: bool = False,
) -> None:
    """Build a pipeline from the CLI context and run it."""
    pipeline = Pipeline(
        operation,
        get_config(ctx),
        targets or [],
        purge_days=purge_days,
        no_confirm=yes,
    )
    run_pipeline(pipeline, quiet=is_quiet(ctx))
