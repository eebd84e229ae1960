"""
Key topology generator CLI.

Generate a key topology from a JSON spec with in-process key primitives and
print it in the shape the system under test's `generateKey` method returns.

Usage::

    python -m tck_core --spec topology.json
    echo '{"type": "keyList", "keys": [{"type": "ed25519PrivateKey"}]}' | python -m tck_core
    python -m tck_core --spec topology.json --signers

Options:
    --spec      Path to a JSON topology spec (default: read stdin)
    --signers   Print only the flattened signer set, one key per line
    --indent    JSON indentation (default: 2)
    -v          Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from tck_core.subspecs.keys import TopologyGenerator
from tck_core.types import GenerationError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr so stdout stays machine-readable."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def load_spec(path: Path | None) -> Any:
    """Read a JSON spec from a file, or from stdin when no path is given."""
    text = sys.stdin.read() if path is None else path.read_text()
    return json.loads(text)


async def run(spec: Any, signers_only: bool, indent: int) -> str:
    """Generate a topology and render the output text."""
    topology = await TopologyGenerator().generate(spec)
    if signers_only:
        return "\n".join(topology.private_keys)
    return json.dumps(topology.to_json(), indent=indent)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        prog="tck_core",
        description="Generate a key topology",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--spec",
        type=Path,
        default=None,
        help="Path to a JSON topology spec (default: read stdin)",
    )
    parser.add_argument(
        "--signers",
        action="store_true",
        help="Print only the flattened signer set",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        spec = load_spec(args.spec)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Cannot read spec: %s", exc)
        return 2

    try:
        output = asyncio.run(run(spec, args.signers, args.indent))
    except GenerationError as exc:
        logger.error("%s", exc)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
