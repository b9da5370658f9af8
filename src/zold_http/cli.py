"""Command-line interface for pinging a single node."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .client import Http
from .data_models import Response
from .exceptions import InvalidRequestError
from .logging_utils import configure_logging
from .transport import Transport

LOGGER = configure_logging(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send one GET request to a Zold node.")
    parser.add_argument("uri", help="Absolute http(s) URI of the node")
    parser.add_argument("--network", default=None,
                        help="Network tag to announce. Overrides ZOLD_NETWORK.")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to wait before giving up. Overrides ZOLD_HTTP_TIMEOUT.")
    parser.add_argument("--score", default=None, help="Score text to announce to the node.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    return parser.parse_args(argv)


def run_cli(argv: Sequence[str] | None = None, transport: Optional[Transport] = None) -> Response:
    args = parse_args(argv)
    if args.verbose:
        for name in (__name__, "zold_http.client"):
            configure_logging(name, level="DEBUG")

    http = Http(args.uri, network=args.network, timeout=args.timeout,
                score=args.score, transport=transport)
    res = http.get()

    print(res.code)
    for name, value in res.header.items():
        print(f"{name}: {value}")
    print()
    print(res.body)
    return res


def main() -> None:
    try:
        res = run_cli()
    except InvalidRequestError as exc:
        LOGGER.error("%s", exc)
        sys.exit(2)
    sys.exit(1 if res.failed else 0)


if __name__ == "__main__":
    main()
