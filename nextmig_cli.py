"""
nextmig CLI

Entry point: argument parsing and dispatch only.
All command logic lives in cli.handlers.
"""

import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from cli.wiring import build_parser, dispatch_command
from nextmig import __version__


def _load_environment(env_file: Optional[Path] = None) -> None:
    """Load NEXTMIG_* settings from .env (cwd by default); exported variables win."""
    load_dotenv(env_file or Path.cwd() / ".env", override=False)


def main(argv: Optional[List[str]] = None) -> int:
    _load_environment()
    parser = build_parser(version=__version__)
    args = parser.parse_args(argv)
    return dispatch_command(parser, args)


if __name__ == "__main__":
    sys.exit(main())
