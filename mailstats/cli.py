"""Command line entry point."""

import logging
import sys
from typing import List, Optional, Tuple

import click

from .config import DEFAULT_PREFIX, DEFAULT_TEST_LIMIT, RunOptions, build_window, split_mailboxes
from .errors import MailStatsError
from .models import DEFAULT_SKIP, SkipPolicy
from .outlook import list_mailbox_names, outlook_session
from .pipeline import run

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def setup_logging(quiet: bool, log_file: Optional[str]) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, handlers=handlers, force=True)
    if quiet:
        handlers[0].setLevel(logging.WARNING)


def select_mailboxes(ns) -> List[str]:
    names = list_mailbox_names(ns)
    if not names:
        raise click.ClickException("No Outlook mailboxes found.")
    for i, name in enumerate(names, 1):
        click.echo(f"{i}. {name}")
    while True:
        raw = click.prompt("Select mailbox number(s), comma-separated", type=str)
        try:
            picks = [int(p) for p in raw.replace(" ", "").split(",") if p]
        except ValueError:
            click.echo("Please enter numbers only.")
            continue
        if picks and all(1 <= p <= len(names) for p in picks):
            return split_mailboxes(names[p - 1] for p in picks)
        click.echo("Invalid choice. Please try again.")


@click.command()
@click.option("--mailbox", "-m", "mailboxes", multiple=True, envvar="MAILSTATS_MAILBOX",
              help="Mailbox display name(s); repeat or separate with commas.")
@click.option("--template", type=click.Path(dir_okay=False), envvar="MAILSTATS_TEMPLATE",
              help="Template workbook copied for the output.")
@click.option("--output-dir", default=".", show_default=True, envvar="MAILSTATS_OUTPUT_DIR",
              type=click.Path(file_okay=False), help="Directory for the workbook (created if absent).")
@click.option("--start", help="Start date, DD-MM-YYYY.")
@click.option("--end", help="End date, DD-MM-YYYY.")
@click.option("--years-back", default=0, type=click.IntRange(min=0), help="Window start, years before today.")
@click.option("--months-back", default=0, type=click.IntRange(min=0), help="Window start, months before today.")
@click.option("--prefix", default=DEFAULT_PREFIX, show_default=True, help="Workbook file name prefix.")
@click.option("--skip", "skip", multiple=True, help="Folder path substring to skip (replaces the defaults).")
@click.option("--quiet", is_flag=True, help="Suppress progress output.")
@click.option("--test-mode", is_flag=True, help="Stop after --test-limit records.")
@click.option("--test-limit", default=DEFAULT_TEST_LIMIT, show_default=True, type=click.IntRange(min=1))
@click.option("--no-select", is_flag=True, help="Never prompt for a mailbox.")
@click.option("--require-running", is_flag=True, help="Only attach to an already running Outlook.")
@click.option("--log-file", type=click.Path(dir_okay=False), envvar="MAILSTATS_LOG_FILE",
              help="Also write the log to this file.")
def cli(mailboxes: Tuple[str, ...], template: Optional[str], output_dir: str, start: Optional[str],
        end: Optional[str], years_back: int, months_back: int, prefix: str, skip: Tuple[str, ...],
        quiet: bool, test_mode: bool, test_limit: int, no_select: bool, require_running: bool,
        log_file: Optional[str]) -> None:
    """Export sent/received mail statistics from Outlook to Excel."""
    setup_logging(quiet, log_file)
    names = split_mailboxes(mailboxes)
    if not names and no_select:
        raise click.UsageError("--no-select needs at least one --mailbox.")

    try:
        window = build_window(start, end, years_back, months_back)
        with outlook_session(require_running=require_running) as ns:
            if not names:
                names = select_mailboxes(ns)
            options = RunOptions(
                mailboxes=names,
                window=window,
                output_dir=output_dir,
                template=template,
                prefix=prefix,
                skip_policy=SkipPolicy.of(skip) if skip else SkipPolicy(DEFAULT_SKIP),
                test_mode=test_mode,
                test_limit=test_limit,
                show_progress=not quiet,
                require_running=require_running,
            )
            out_path = run(options, ns)
    except MailStatsError as e:
        logger.error("%s", e)
        sys.exit(1)

    if out_path:
        click.echo(f"Saved to: {out_path}")
    else:
        click.echo("No emails matched; nothing exported.")


def main() -> None:
    cli(prog_name="mailstats")
