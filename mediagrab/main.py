import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor

import colorama
from colorama import Fore, Style

from mediagrab.bootstrap import create_container
from mediagrab.core.errors import MediaGrabError

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | [%(request_id)s] %(message)s"


class _RequestIdFilter(logging.Filter):
    """Fill in request_id for records that were not logged through the service adapter."""

    def filter(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def configure_logging(level: str):
    handler = logging.StreamHandler()
    handler.addFilter(_RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])


def _run_one(media_service, url):
    try:
        return url, media_service.process(url), None
    except MediaGrabError as e:
        return url, None, e


def main(argv=None):
    parser = argparse.ArgumentParser(description="mediagrab - resolve social media links to media files")
    parser.add_argument("urls", nargs="*", help="URLs to process")
    parser.add_argument("--list-hosts", action="store_true", help="Print supported hostnames and exit")
    parser.add_argument("-j", "--workers", type=int, default=None, help="Concurrent extractions")
    args = parser.parse_args(argv)

    container = create_container()
    config = container["config"]
    media_service = container["media_service"]
    configure_logging(config.log_level)
    colorama.init()

    if args.list_hosts:
        for host in media_service.get_supported_domains():
            print(host)
        return 0

    if not args.urls:
        parser.print_usage()
        return 2

    workers = max(1, args.workers or config.workers)
    failed = False
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for url, result, error in executor.map(lambda u: _run_one(media_service, u), args.urls):
            if error is not None:
                failed = True
                print(f"{Fore.RED}✗ {url}{Style.RESET_ALL}  [{error.kind.value}/{error.stage}] {error}")
            elif result is None:
                print(f"{Fore.YELLOW}- {url}{Style.RESET_ALL}  unsupported host")
            else:
                print(f"{Fore.GREEN}✓ {url}{Style.RESET_ALL}  ({result.location_kind.value})")
                for location in result.locations:
                    print(f"    {location}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
