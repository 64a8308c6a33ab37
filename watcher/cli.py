import argparse
import os

from tmapi.tmapi import defaults


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tournament Manager field set watcher.")
    parser.add_argument(
        "--address",
        default=os.getenv("TM_ADDRESS", defaults["address"]),
        help="Address of the TM server, without http:// (default: $TM_ADDRESS or localhost).",
    )
    parser.add_argument(
        "--password",
        default=os.getenv("TM_PASSWORD"),
        help="TM admin password (default: $TM_PASSWORD).",
    )
    parser.add_argument(
        "--division",
        default=os.getenv("TM_DIVISION", defaults["division"]),
        help="Division name as used in TM URLs (default: $TM_DIVISION or division1).",
    )
    parser.add_argument(
        "--fieldset",
        type=int,
        default=int(os.getenv("TM_FIELDSET", defaults["fieldset_id"])),
        help="Field set ID to listen to (default: $TM_FIELDSET or 1).",
    )
    parser.add_argument(
        "--omit-country",
        action="store_true",
        help="Drop the country from team locations that include a state/province.",
    )

    one_shot = parser.add_mutually_exclusive_group()
    one_shot.add_argument("--teams", action="store_true", help="Print the team list and exit.")
    one_shot.add_argument("--matches", action="store_true", help="Print the match list and exit.")
    one_shot.add_argument("--match", metavar="MATCH", help="Print the teams in one match (e.g. Q20) and exit.")
    one_shot.add_argument(
        "--tail-logs",
        action="store_true",
        help="Print the end of the watcher log instead of connecting to TM.",
    )

    parser.add_argument(
        "--tail-lines",
        type=int,
        default=100,
        help="How many recent lines --tail-logs prints, rotated backups included (default: 100).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    return parser
