"""Single and batch WHOIS queries with retries, logging and result files."""

from __future__ import annotations

import logging
import queue
import sys
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, TextIO
from urllib.parse import SplitResult

from gois.analyzer import AVAILABLE, REGISTERED, UNKNOWN, Analyzer, QueryResult
from gois.client import Client
from gois.errors import WhoisError

MODE_NORMAL = "normal"
MODE_SIMPLE = "simple"

_RULE_WIDTH = 80
_HEAVY_RULE = "=" * _RULE_WIDTH
_LIGHT_RULE = "-" * _RULE_WIDTH

logger = logging.getLogger("gois")


class _Fetcher(Protocol):
    def fetch(self, domain: str, whois_server: str | None = None) -> QueryResult: ...


@dataclass
class QueryConfig:
    """Settings shared by every query a runner makes."""

    timeout: float = 10.0
    proxy: SplitResult | None = None
    output_file: str = ""
    mode: str = MODE_NORMAL
    max_retries: int = 3
    concurrency: int = 5
    whois_server: str = ""


@dataclass
class DomainOutcome:
    """What happened to one domain."""

    domain: str
    success: bool
    result: QueryResult | None = None
    error: BaseException | None = None


@dataclass
class BatchSummary:
    """Counters collected over a batch of queries."""

    requested: int = 0
    processed: int = 0
    success: int = 0
    failed: int = 0
    available: int = 0
    registered: int = 0
    unknown: int = 0

    def has_failures(self) -> bool:
        """Return True when at least one domain could not be queried."""
        return self.failed > 0


def _timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def _progress_interval(total_hint: int) -> int:
    if total_hint >= 1_000_000:
        return 10_000
    if total_hint >= 100_000:
        return 1_000
    if total_hint >= 10_000:
        return 500
    return 100


class QueryRunner:
    """Runs WHOIS queries, prints results and optionally writes them to a file."""

    def __init__(
        self,
        config: QueryConfig,
        client: _Fetcher | None = None,
        analyzer: Analyzer | None = None,
        *,
        output: TextIO | None = None,
        retry_delay: float = 2.0,
    ) -> None:
        self.config = config
        self.client = client if client is not None else Client(config.timeout, config.proxy)
        self.analyzer = analyzer if analyzer is not None else Analyzer()
        self.retry_delay = retry_delay
        self._output = output
        self._file_lock = threading.Lock()
        self._print_lock = threading.Lock()
        self._out_file: TextIO | None = None
        if config.output_file:
            self._open_output_file()

    def __enter__(self) -> QueryRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _simple(self) -> bool:
        return self.config.mode == MODE_SIMPLE

    def _open_output_file(self) -> None:
        out = open(self.config.output_file, "w", encoding="utf-8")
        self._out_file = out
        if self._simple:
            out.write("domain,status\n")
        else:
            out.write("# WHOIS query results\n")
            out.write(f"# Query time: {_timestamp()}\n")
            out.write(f"# Mode: {self.config.mode}\n")
            out.write(f"{_HEAVY_RULE}\n\n")
        out.flush()

    def close(self) -> None:
        """Close the output file, if one is open."""
        with self._file_lock:
            if self._out_file is not None:
                self._out_file.close()
                self._out_file = None

    def query_single_domain(self, domain: str) -> DomainOutcome:
        """Query one domain, retrying on failure, and report the outcome."""
        logger.info("querying domain domain=%s", domain)
        retries = self.config.max_retries
        last_error: BaseException | None = None

        for attempt in range(retries):
            try:
                result = self.client.fetch(domain, self.config.whois_server or None)
            except WhoisError as exc:
                last_error = exc
                if attempt < retries - 1:
                    logger.warning(
                        "query failed, retrying domain=%s attempt=%d max_retries=%d error=%s",
                        domain,
                        attempt + 1,
                        retries,
                        exc,
                    )
                    time.sleep(self.retry_delay)
                continue
            self._print_result(domain, result)
            self._write_result(domain, result, None)
            return DomainOutcome(domain=domain, success=True, result=result)

        logger.error("domain query failed domain=%s error=%s", domain, last_error)
        self._write_result(domain, None, last_error)
        return DomainOutcome(domain=domain, success=False, error=last_error)

    def query_batch_domains(self, domains: Iterable[str]) -> BatchSummary:
        """Query every domain of an in-memory list."""
        domain_list = list(domains)
        logger.info(
            "starting batch query total_domains=%d concurrency=%d",
            len(domain_list),
            self.config.concurrency,
        )
        return self.query_batch_domains_stream(domain_list, len(domain_list))

    def query_batch_domains_stream(
        self, domains: Iterable[str], total_hint: int
    ) -> BatchSummary:
        """Query domains from any iterable with a pool of workers.

        ``total_hint`` is the expected count, or a negative number when unknown.
        """
        workers = max(self.config.concurrency, 1)
        source = iter(domains)
        source_lock = threading.Lock()
        results: queue.Queue[DomainOutcome | None] = queue.Queue(maxsize=workers * 2)

        def work() -> None:
            try:
                while True:
                    with source_lock:
                        domain = next(source, None)
                    if domain is None:
                        return
                    results.put(self.query_single_domain(domain))
            finally:
                results.put(None)

        threads = [threading.Thread(target=work, daemon=True) for _ in range(workers)]
        for thread in threads:
            thread.start()

        summary = BatchSummary(requested=total_hint)
        interval = _progress_interval(total_hint) if total_hint > 0 else 100
        finished = 0
        while finished < workers:
            outcome = results.get()
            if outcome is None:
                finished += 1
                continue
            self._count(summary, outcome)
            if summary.processed % interval == 0:
                if total_hint > 0:
                    logger.info(
                        "query progress completed=%d total=%d", summary.processed, total_hint
                    )
                else:
                    logger.info("query progress completed=%d", summary.processed)

        for thread in threads:
            thread.join()

        if summary.requested < 0:
            summary.requested = summary.processed
        self._log_statistics(summary)
        return summary

    def _count(self, summary: BatchSummary, outcome: DomainOutcome) -> None:
        summary.processed += 1
        if not outcome.success:
            summary.failed += 1
            return
        summary.success += 1
        if self._simple and outcome.result is not None:
            status = self.analyzer.get_domain_status(outcome.result)
            if status == AVAILABLE:
                summary.available += 1
            elif status == REGISTERED:
                summary.registered += 1
            elif status == UNKNOWN:
                summary.unknown += 1

    def _print_result(self, domain: str, result: QueryResult) -> None:
        if self._simple:
            status = self.analyzer.get_domain_status(result)
            logger.info("query result domain=%s status=%s", domain, status)
            return
        out = self._output if self._output is not None else sys.stdout
        lines = [_HEAVY_RULE, f"Domain: {domain}", _LIGHT_RULE]
        if result.registrar_result:
            lines += ["\nRegistrar WHOIS result:", result.registrar_result]
        if result.registry_result:
            lines += ["\nRegistry WHOIS result:", result.registry_result]
        lines.append(_HEAVY_RULE)
        with self._print_lock:
            for line in lines:
                print(line, file=out)

    def _write_result(
        self, domain: str, result: QueryResult | None, error: BaseException | None
    ) -> None:
        with self._file_lock:
            out = self._out_file
            if out is None:
                return
            if self._simple:
                status = UNKNOWN
                if error is None and result is not None:
                    status = self.analyzer.get_domain_status(result)
                out.write(f"{domain},{status}\n")
            else:
                out.write(f"\n{_HEAVY_RULE}\n")
                out.write(f"Domain: {domain}\n")
                out.write(f"Query time: {_timestamp()}\n")
                if error is not None:
                    out.write(f"Error: {error}\n")
                elif result is not None:
                    out.write("\nRegistrar WHOIS server result:\n")
                    out.write(f"{_LIGHT_RULE}\n")
                    out.write(f"{result.registrar_result or 'No data'}\n")
                    out.write("\n\nRegistry WHOIS server result:\n")
                    out.write(f"{_LIGHT_RULE}\n")
                    out.write(f"{result.registry_result or 'No data'}\n")
                out.write(f"\n{_HEAVY_RULE}\n")
            out.flush()

    def _log_statistics(self, summary: BatchSummary) -> None:
        message = "batch query finished requested=%d processed=%d success=%d failed=%d"
        values: list[int] = [
            summary.requested,
            summary.processed,
            summary.success,
            summary.failed,
        ]
        if self._simple:
            message += " available=%d registered=%d unknown=%d"
            values += [summary.available, summary.registered, summary.unknown]
        logger.info(message, *values)