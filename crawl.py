#!/usr/bin/env python3
import argparse
import logging

from politecrawler.config import CrawlConfig, DEFAULT_USER_AGENT
from politecrawler.engine import Crawler
from politecrawler.prometheus_exporter import PrometheusExporter


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Polite priority-first web crawler.")
    parser.add_argument("--seed", nargs="+", required=True, help="One or more seed URLs.")
    parser.add_argument("--priority", type=int, default=3, help="Seed priority; each hop lowers it by one.")
    parser.add_argument("--workers", type=int, default=4, help="Number of worker threads.")
    parser.add_argument("--rps", type=float, default=1.0, help="Global requests per second.")
    parser.add_argument("--allow", nargs="+", default=[], help="Only crawl these hosts.")
    parser.add_argument("--block", nargs="+", default=[], help="Never crawl these hosts.")
    parser.add_argument("--default-delay", type=float, default=1.0, help="Per-host delay when robots.txt gives none.")
    parser.add_argument("--retries", type=int, default=3, help="Attempts per page before giving up.")
    parser.add_argument("--timeout", type=float, default=30.0, help="HTTP read timeout in seconds.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds.")
    parser.add_argument("--metrics-interval", type=float, default=10.0, help="Seconds between perf logs (0 to disable).")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Port for Prometheus metrics endpoint (0 to disable).")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    config = CrawlConfig(
        max_workers=max(1, args.workers),
        requests_per_second=args.rps if args.rps > 0 else 1.0,
        allowed_domains=frozenset(args.allow),
        blocked_domains=frozenset(args.block),
        default_crawl_delay=max(0.0, args.default_delay),
        max_retries=max(1, args.retries),
        request_timeout=max(1.0, args.timeout),
        user_agent=args.user_agent,
        metrics_interval=max(0.0, args.metrics_interval),
    )

    crawler = Crawler(config)
    seeded = crawler.add_urls(args.seed, args.priority)
    logging.info("Seeded %d of %d URLs", seeded, len(args.seed))

    exporter = None
    if args.prometheus_port:
        exporter = PrometheusExporter(crawler.metrics, crawler.frontier, port=args.prometheus_port)
        exporter.start()
        logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)

    try:
        drained = crawler.run(timeout=args.duration)
        if not drained:
            logging.info("Duration elapsed with %d tasks pending", len(crawler.frontier))
    except KeyboardInterrupt:
        logging.info("Interrupted, workers stopped")
    finally:
        if exporter:
            exporter.stop()


if __name__ == "__main__":
    main()
