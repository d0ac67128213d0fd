import json
import time

import click

from .config import LOG_FORMATS, LOG_LEVELS, load_settings
from .errors import SourceError
from .logging_utils import setup_logging
from .report import echo_result
from .sources import ensure_links_file, read_jobs
from .worker import run


@click.group(help="linkcheck — concurrent link health and title report")
def cli():
    pass


# ---------- Run ----------
@cli.command("run", help="Fetch every link in a CSV file and report status and title")
@click.option("--file", "links_file", default=None,
              help="CSV of suggestedName,Link rows (created with samples if missing)")
@click.option("--workers", type=int, default=None, help="Number of worker threads [default: 5]")
@click.option("--timeout", default=None,
              help="Deadline for each request, headers and body, e.g. 10, 10s, 500ms, 1m [default: 10s]")
@click.option("--queue-size", type=int, default=None, help="Job queue capacity [default: 100]")
@click.option("--log-level", default=None,
              type=click.Choice(LOG_LEVELS, case_sensitive=False), help="[default: INFO]")
@click.option("--log-format", default=None, type=click.Choice(LOG_FORMATS), help="[default: text]")
def run_cmd(links_file, workers, timeout, queue_size, log_level, log_format):
    try:
        settings = load_settings({
            "links_file": links_file,
            "workers": workers,
            "timeout": timeout,
            "queue_size": queue_size,
            "log_level": log_level,
            "log_format": log_format,
        })
    except ValueError as e:
        raise click.BadParameter(str(e))

    setup_logging(settings)

    try:
        ensure_links_file(settings.links_file)
        jobs = read_jobs(settings.links_file)
        started = time.perf_counter()
        failed = []

        def sink(result):
            if not result.success:
                failed.append(result)
            echo_result(result)

        total = run(
            jobs,
            settings.workers,
            sink,
            config=settings.fetcher_config(),
            queue_size=settings.queue_size,
        )
    except SourceError as e:
        click.secho(f"Error: {e}", fg="red")
        raise SystemExit(1)

    click.secho(
        f"Checked {total} link(s) in {time.perf_counter() - started:.2f}s, {len(failed)} failed.",
        fg="yellow" if failed else "green",
        err=True,
    )


# ---------- Config ----------
@cli.command("config", help="Show the effective configuration")
def config_cmd():
    try:
        settings = load_settings()
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red")
        raise SystemExit(1)
    click.echo(json.dumps(settings.as_dict(), indent=2))


def main():
    cli()
