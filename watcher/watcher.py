"""Command line runtime for watching a TM field set.

One-shot modes print the team list, the match list, or the teams in a single
match. Without them the watcher listens to the field set and logs the teams of
every match that gets queued until TM closes the connection.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from shared.errors import TMScraperError
from shared.logging_utils import configure_logging, read_recent_lines, resolve_log_file
from tmscraper.models import ResolvedMatch, Team
from tmscraper.tm_scraper import TMScraper
from watcher.cli import build_cli_parser

WATCHER_LOG_FILE = resolve_log_file()

logger = logging.getLogger("tmscraper.watcher")


def describe_team(team: Optional[Team]) -> str:
    if team is None:
        return "(not on team list)"
    return f"{team.number} {team.name} | {team.location} | {team.organization}"


def describe_match(resolved: ResolvedMatch) -> str:
    lines = [f"{resolved.match_num} ({resolved.program})"]
    for slot, team in resolved.teams.items():
        lines.append(f"  {slot:<6} {describe_team(team)}")
    return "\n".join(lines)


def log_queued_match(resolved: ResolvedMatch) -> None:
    logger.info("Match queued\n%s", describe_match(resolved))


def log_match_started() -> None:
    logger.info("Match started at %s", time.ctime(time.time()))


async def main_async(scraper: TMScraper) -> None:
    """Subscribe to field set events and run until the connection closes."""
    await scraper.on_match_queued(log_queued_match)
    await scraper.on_match_started(log_match_started)
    try:
        await scraper.stream.wait_closed()
    finally:
        await scraper.close()


def run_one_shot(scraper: TMScraper, cli_args) -> bool:
    if cli_args.teams:
        for team in scraper.get_teams():
            print(describe_team(team))
        return True
    if cli_args.matches:
        for match in scraper.get_matches():
            print(match.match_num, " ".join(match.slots().values()))
        return True
    if cli_args.match:
        print(describe_match(scraper.get_match_teams(cli_args.match)))
        return True
    return False


def show_logs(log_file: Path, lines: int) -> int:
    if lines < 0:
        print("--tail-lines must be >= 0")
        return 2

    recent = read_recent_lines(log_file, lines)
    if not recent and not log_file.exists():
        print(f"Log file does not exist yet: {log_file}")
        return 1
    print("".join(recent), end="")
    return 0


def main(argv=None) -> int:
    parser = build_cli_parser()
    cli_args = parser.parse_args(argv)

    # Rather than connect to TM, print the end of the log.
    # Most useful when a separate process is already watching.
    if cli_args.tail_logs:
        return show_logs(WATCHER_LOG_FILE, cli_args.tail_lines)

    if not cli_args.password:
        parser.error("a TM admin password is required (--password or $TM_PASSWORD)")

    root_logger = configure_logging(
        WATCHER_LOG_FILE,
        level=logging.DEBUG if cli_args.verbose else logging.INFO,
    )

    scraper = TMScraper(
        address=cli_args.address,
        password=cli_args.password,
        division=cli_args.division,
        fieldset_id=cli_args.fieldset,
        omit_country=cli_args.omit_country,
    )
    try:
        if run_one_shot(scraper, cli_args):
            return 0

        root_logger.info("Watching field set %s on %s. Log file: %s", cli_args.fieldset, cli_args.address, WATCHER_LOG_FILE)
        asyncio.run(main_async(scraper))
    except TMScraperError as exc:
        print(f"Error: {exc}")
        return 2
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
