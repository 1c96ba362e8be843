"""Command line interface: query, batch and generate commands."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import SplitResult, urlsplit

from gois.generator import generate_domains_from_pattern, load_domains_from_file
from gois.runner import QueryConfig, QueryRunner

VERSION = "1.0.0"
MAX_INT64 = 2**63 - 1

logger = logging.getLogger("gois")


def _add_global_options(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        "-t", "--timeout", type=int, default=default(10), help="query timeout in seconds"
    )
    parser.add_argument(
        "-p", "--proxy", default=default(""), help="proxy, as type://addr:port"
    )
    parser.add_argument(
        "-o", "--output", default=default(""), help="file to write results to"
    )
    parser.add_argument(
        "-m",
        "--mode",
        default=default("normal"),
        help="normal = full answer, simple = availability only",
    )
    parser.add_argument(
        "-r", "--retries", type=int, default=default(3), help="attempts per domain"
    )
    parser.add_argument(
        "-c", "--concurrency", type=int, default=default(5), help="workers for batch queries"
    )
    parser.add_argument(
        "-w", "--whois-server", default=default(""), help="WHOIS server to use (optional)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its three commands."""
    parser = argparse.ArgumentParser(
        prog="gois",
        description="WHOIS domain lookup tool: single queries, batches and pattern generation.",
    )
    parser.add_argument("--version", action="version", version=f"gois {VERSION}")
    _add_global_options(parser, suppress=False)
    commands = parser.add_subparsers(dest="command")

    query = commands.add_parser("query", help="query the WHOIS record of one domain")
    query.add_argument("domain")
    _add_global_options(query, suppress=True)
    query.set_defaults(handler=_run_query)

    batch = commands.add_parser(
        "batch",
        help="query domains listed in a file",
        description="One domain per line; blank lines and lines starting with # are skipped.",
    )
    batch.add_argument("file")
    _add_global_options(batch, suppress=True)
    batch.set_defaults(handler=_run_batch)

    generate = commands.add_parser(
        "generate",
        help="generate domains from a pattern and query them",
        description=(
            "Patterns use [a-z], [A-Z], [0-9] or [abc] character sets, "
            "each optionally followed by {n} to repeat it n times, e.g. [a-z]{3}.com"
        ),
    )
    generate.add_argument("pattern")
    _add_global_options(generate, suppress=True)
    generate.set_defaults(handler=_run_generate)
    return parser


def parse_proxy(proxy: str) -> SplitResult:
    """Parse a ``scheme://host:port`` proxy URL."""
    try:
        url = urlsplit(proxy)
    except ValueError as exc:
        raise ValueError(f"failed to parse proxy: {exc}") from exc
    if not url.scheme or not url.netloc:
        raise ValueError(f"invalid proxy format: {proxy} (expected scheme://host:port)")
    return url


def create_runner(args: argparse.Namespace) -> QueryRunner:
    """Build a query runner from parsed command line options."""
    config = QueryConfig(
        timeout=float(args.timeout),
        output_file=args.output,
        mode=args.mode,
        max_retries=args.retries,
        concurrency=args.concurrency,
        whois_server=args.whois_server,
    )
    if args.proxy:
        config.proxy = parse_proxy(args.proxy)
    return QueryRunner(config)


def _make_runner(args: argparse.Namespace) -> QueryRunner | None:
    try:
        return create_runner(args)
    except (ValueError, OSError) as exc:
        logger.error("initialisation failed error=%s", exc)
        return None


def _run_query(args: argparse.Namespace) -> int:
    runner = _make_runner(args)
    if runner is None:
        return 1
    with runner:
        outcome = runner.query_single_domain(args.domain)
    return 0 if outcome.success else 1


def _run_batch(args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.exists():
        logger.error("file does not exist file=%s", args.file)
        return 1
    try:
        domains = load_domains_from_file(path)
    except (ValueError, OSError) as exc:
        logger.error("failed to load domain list error=%s", exc)
        return 1
    logger.info("loaded domain list file=%s count=%d", args.file, len(domains))

    runner = _make_runner(args)
    if runner is None:
        return 1
    with runner:
        summary = runner.query_batch_domains(domains)
    return 1 if summary.has_failures() else 0


def _run_generate(args: argparse.Namespace) -> int:
    logger.info("generating domains from pattern pattern=%s", args.pattern)
    try:
        stream, total = generate_domains_from_pattern(args.pattern)
    except ValueError as exc:
        logger.error("failed to generate domains error=%s", exc)
        return 1
    logger.info("domain generation ready count=%d", total)

    if total > 10_000:
        logger.warning(
            "a large number of domains will be queried and it may take a long time "
            "count=%d suggestion=use a smaller charset or fewer repeats",
            total,
        )
    elif total > 1_000:
        logger.info(
            "many domains will be queried, a higher concurrency is advised "
            "count=%d suggestion=raise -c",
            total,
        )

    runner = _make_runner(args)
    if runner is None:
        return 1
    total_hint = total if total <= MAX_INT64 else -1
    with runner:
        summary = runner.query_batch_domains_stream(stream, total_hint)
    return 1 if summary.has_failures() else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())