#!/usr/bin/env python3
import argparse
import itertools
import logging
import sys
from typing import Iterable, Iterator, List, Optional, TextIO

from fetchlib.config import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_CONTENT_LIMIT,
    DEFAULT_ERROR_CODE,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_READ_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    FetchConfig,
)
from fetchlib.metrics import FetchMetrics, StatsLogger
from fetchlib.net import DefaultFetcher
from fetchlib.storage import JsonlWriter, outcome_record
from fetchlib.types import Resource


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch URLs one at a time and write one JSON line per outcome.")
    parser.add_argument("inputs", nargs="*", default=["-"], help="Files with one URL per line ('-' for stdin).")
    parser.add_argument("--out", dest="output_path", default="-", help="Path to JSONL output file ('-' for stdout).")
    parser.add_argument(
        "--connect-timeout", type=int, default=DEFAULT_CONNECT_TIMEOUT_MS, help="Connect timeout in milliseconds."
    )
    parser.add_argument(
        "--read-timeout", type=int, default=DEFAULT_READ_TIMEOUT_MS, help="Read timeout in milliseconds."
    )
    parser.add_argument(
        "--max-bytes", type=int, default=DEFAULT_CONTENT_LIMIT, help="Stop reading a body once this many bytes are kept."
    )
    parser.add_argument(
        "--error-code", type=int, default=DEFAULT_ERROR_CODE, help="Status code reported for failed fetches."
    )
    parser.add_argument("--max-redirects", type=int, default=DEFAULT_MAX_REDIRECTS, help="Redirects to follow.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--limit", type=int, default=None, help="Stop after this many outcomes.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    parser.add_argument("--metrics-interval", type=float, default=0.0, help="Seconds between perf logs (0 to disable).")
    parser.add_argument(
        "--prometheus-port", type=int, default=0, help="Port for Prometheus metrics endpoint (0 to disable)."
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> FetchConfig:
    return FetchConfig(
        connect_timeout_ms=max(1, args.connect_timeout),
        read_timeout_ms=max(1, args.read_timeout),
        content_limit=max(1, args.max_bytes),
        default_error_code=args.error_code,
        max_redirects=max(0, args.max_redirects),
        user_agent=args.user_agent,
    )


def iter_urls(streams: Iterable[TextIO]) -> Iterator[str]:
    for stream in streams:
        for line in stream:
            url = line.strip()
            if not url or url.startswith("#"):
                continue
            yield url


def _open_inputs(paths: List[str]) -> Iterator[TextIO]:
    for path in paths:
        if path == "-":
            yield sys.stdin
            continue
        with open(path, "r", encoding="utf-8") as fh:
            yield fh


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    metrics = FetchMetrics()
    fetcher = DefaultFetcher(build_config(args), metrics=metrics)

    stats_thread = None
    if args.metrics_interval > 0:
        stats_thread = StatsLogger(metrics, args.metrics_interval, logging.info)
        stats_thread.start()
    exporter = None
    if args.prometheus_port > 0:
        from fetchlib.prometheus_exporter import PrometheusExporter

        exporter = PrometheusExporter(metrics, port=args.prometheus_port)
        exporter.start()
        logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)

    resources = (Resource(url) for url in iter_urls(_open_inputs(args.inputs)))
    outcomes = fetcher.fetch_stream(resources)
    if args.limit is not None:
        outcomes = itertools.islice(outcomes, max(0, args.limit))

    try:
        with JsonlWriter(args.output_path) as writer:
            for fetched in outcomes:
                writer.write(outcome_record(fetched))
    finally:
        if stats_thread:
            stats_thread.stop()
        if exporter:
            exporter.stop()

    totals, _elapsed = metrics.snapshot()
    logging.info("Finished. Fetches: %d, errors: %d. Output: %s", totals.fetches, totals.errors, args.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
