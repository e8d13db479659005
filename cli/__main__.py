"""Entry point for nunchi CLI client."""

import argparse
import sys

from cli.api_client import NunchiAPIClient
from cli.console import ConsoleUI

COMMANDS_HELP = """\
commands inside the chat:
  status     rank, XP, streak and counters
  words      list saved words (marks them as seen)
  keep       save the words taught in the last reply
  translate  record a use of the translate button
  save       save this conversation as a lesson
  exit       quit
anything else is sent to Moon-jo as your message"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m cli',
        description='Nunchi - Korean conversation practice with your goshiwon neighbor',
        epilog=COMMANDS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='nunchi API server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='learner id, letters, digits, - and _ (default: default)'
    )
    return parser


def main():
    args = build_parser().parse_args()

    client = NunchiAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\n안녕히 가세요!')
        sys.exit(0)


if __name__ == '__main__':
    main()
