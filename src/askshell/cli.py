"""CLI entrypoint for askshell."""

from __future__ import annotations

import click

from askshell.config.models import apply_env_overrides
from askshell.config.store import SettingsStore
from askshell.errors import OllamaUnavailableError, UpdateError
from askshell.ollama import OllamaClient
from askshell.repl import run_interactive
from askshell.runtime_logging import configure_runtime_logging
from askshell.session.controller import SessionController, TurnState
from askshell.stats import StatsRecorder, StatsStore, render_stats
from askshell.version import __version__
from askshell.version_check import BackgroundVersionCheck, self_update


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "allow_interspersed_args": False,
    }
)
@click.argument("query", nargs=-1)
@click.option("--model", "model_name", default=None, help="Ollama model to use (default: $ASK_MODEL or settings)")
@click.option("-v", "--version", "show_version", is_flag=True, help="Show version and exit")
@click.option("--update", "do_update", is_flag=True, help="Update ask to the latest version")
@click.option("--explain", "do_explain", is_flag=True, help="Explain a shell command instead of generating one")
@click.option("--stats", "show_stats", is_flag=True, help="Show local usage statistics")
@click.option("--log-level", default=None, help="Runtime log level (off, error, warning, info, debug)")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Runtime log file")
@click.pass_context
def main(
    ctx: click.Context,
    query: tuple[str, ...],
    model_name: str | None,
    show_version: bool,
    do_update: bool,
    do_explain: bool,
    show_stats: bool,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """ask: turn natural language into shell commands, then confirm and run them.

    With no QUERY an interactive session starts.
    """
    logger = configure_runtime_logging(level=log_level, log_file=log_file)
    settings = apply_env_overrides(SettingsStore().load())
    model = model_name or settings.model.name

    if do_update:
        try:
            click.echo(self_update(settings.updates))
        except UpdateError as exc:
            raise click.ClickException(f"update failed: {exc}")
        return

    if show_version:
        click.echo(f"ask version {__version__}")
        click.echo(f"model: {model}")
        click.echo(f"ollama: {settings.ollama.host}")
        return

    stats_store = StatsStore()
    if show_stats:
        click.echo(render_stats(stats_store.load(), stats_store.path))
        return

    if do_explain and not query:
        raise click.UsageError("--explain needs a command to explain")

    stats = StatsRecorder(stats_store, enabled=settings.statistics.enabled)
    stats.update("record_invocation")

    version_check = BackgroundVersionCheck(settings.updates)
    version_check.start()

    client = OllamaClient(settings.ollama)
    try:
        client.check()
    except OllamaUnavailableError as exc:
        raise click.ClickException(str(exc))

    controller = SessionController(
        generator=client,
        model=model,
        stats=stats,
        mode="oneshot" if query else "interactive",
    )
    logger.info("cli.started", model=model, oneshot=bool(query), explain=do_explain)

    if not query:
        stats.update("record_interactive_session")
        run_interactive(controller)
        _print_update_notice(version_check)
        return

    text = " ".join(query)
    if do_explain:
        outcome = controller.explain(text)
    else:
        outcome = controller.handle(text)
    _print_update_notice(version_check)

    if outcome.state is TurnState.ABORTED and outcome.error is not None:
        ctx.exit(1)


def _print_update_notice(version_check: BackgroundVersionCheck) -> None:
    notice = version_check.notice()
    if notice:
        click.echo(f"\n{notice}", err=True)


if __name__ == "__main__":
    main()
