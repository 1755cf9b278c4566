"""Command-line entry point: ``active-users [START_DATE] [END_DATE]``."""

import logging
import sys

import click
from rich.console import Console

from . import __version__
from .activity import AggregationEngine
from .config import EngineConfig
from .errors import ConfigurationError, InvalidWindowError
from .identity import IdentityFilter
from .profiles import HOST_PREFIXES, PROFILES, build_sources, detect_profile, profile_policy, short_hostname
from .report import print_report, write_report_files
from .sources import MatchStrategy
from .window import TimeWindow

log = logging.getLogger('active_users')

LOG_FORMAT = '[%(levelname)1.1s %(asctime)s.%(msecs)03d %(name)s] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def configure_logging(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )


def _unknown_host_message(hostname):
    known = "\n".join(f"  - {prefix}*  -> {profile}" for prefix, profile in HOST_PREFIXES)
    return (
        f"Unknown hostname '{hostname}'.\n"
        f"Recognised hosts:\n{known}\n"
        f"Pass --profile {'|'.join(sorted(PROFILES))} to choose one explicitly."
    )


@click.command()
@click.version_option(version=__version__)
@click.argument("start_date", required=False)
@click.argument("end_date", required=False)
@click.option("--profile", type=click.Choice(["auto"] + sorted(PROFILES)), default="auto",
              help="Host profile; 'auto' picks it from the hostname.")
@click.option("--strategy", type=click.Choice([s.value for s in MatchStrategy]), default=None,
              help="Directory matching: first file in window, or newest file.")
@click.option("--timeout", type=int, default=None, help="Seconds allowed per directory walk.")
@click.option("--workers", type=int, default=None, help="Concurrent directory walks.")
@click.option("--lenient/--strict", default=None,
              help="Accept usernames the identity directory does not know.")
@click.option("--skip-known", is_flag=True, default=False,
              help="Skip directories of users already found active (sources list becomes partial).")
@click.option("-o", "--output-dir", default="/tmp", show_default=True, help="Directory for report files.")
@click.option("--prefix", default=None, help="Report file prefix (default: host name).")
@click.option("--no-files", is_flag=True, help="Only print, do not write report files.")
@click.option("-k", "--top", "top_k", type=click.IntRange(min=0), default=5, show_default=True,
              help="Users shown at each end of the list.")
@click.option("--debug", is_flag=True, envvar="DEBUG", help="Verbose logging with per-user failure details.")
def main(start_date, end_date, profile, strategy, timeout, workers, lenient, skip_known,
         output_dir, prefix, no_files, top_k, debug):
    """Find accounts active between START_DATE and END_DATE (YYYY-MM-DD).

    Defaults to the last three months.
    """
    configure_logging(debug)
    hostname = short_hostname()

    try:
        window = TimeWindow.parse(start_date, end_date)
    except InvalidWindowError as e:
        raise click.BadParameter(str(e), param_hint="START_DATE/END_DATE")

    if profile == "auto":
        profile = detect_profile(hostname)
        if profile is None:
            click.echo(_unknown_host_message(hostname), err=True)
            sys.exit(2)

    config = EngineConfig.from_env()
    config.debug = debug
    if timeout is not None:
        config.entry_timeout = timeout
    if workers is not None:
        config.max_workers = workers
    # --lenient/--strict, then ACTIVE_USERS_LENIENT, then the profile
    if lenient is not None:
        config.lenient_fallback = lenient
    elif config.lenient_fallback is None:
        config.lenient_fallback = PROFILES[profile]["lenient_fallback"]
    if skip_known:
        config.skip_known = True

    try:
        config.validate()
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    policy = profile_policy(profile, min_uid=config.min_uid, lenient_fallback=config.lenient_fallback)
    sources = build_sources(profile, strategy=strategy)
    engine = AggregationEngine(IdentityFilter(policy), config=config)

    log.info(f"[cli] {hostname}: profile={profile}, sources={', '.join(s.label for s in sources)}")
    report = engine.run(window, sources)

    console = Console()
    print_report(report, console, k=top_k, host=hostname)

    if not no_files:
        paths = write_report_files(report, output_dir, prefix or hostname)
        console.print("\nFull list saved to:")
        for path in paths.values():
            console.print(f"  {path}")


if __name__ == "__main__":
    main()
