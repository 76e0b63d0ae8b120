"""logrotor entry point: pipes stdin lines into a rotating, timestamped log file."""

import argparse
import io
import logging
import os
import signal
import sys

from logrotor.errors import ConfigError, SetupError
from logrotor.logger import initialize_from_config

logger = logging.getLogger(__name__)


def _signal_handler(sig, _frame):
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    raise KeyboardInterrupt


def _open_stdin():
    # Undecodable bytes become lone surrogates instead of aborting the loop
    return io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="surrogateescape")


def main(argv=None, stdin=None) -> int:
    parser = argparse.ArgumentParser(description="Write stdin lines to a rotating log file")
    parser.add_argument("config", nargs="?", default=os.environ.get("CONFIG_PATH", "config.json"),
                        help="Path to the JSON (or YAML) logger config")
    args = parser.parse_args(argv)
    stdin = stdin or _open_stdin()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [logrotor] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    lines = 0
    try:
        try:
            log = initialize_from_config(args.config)
        except (ConfigError, SetupError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        c = log.config
        logger.info(
            "Logging to %s (max_size=%dMB, max_backups=%d, max_age=%dd, compress=%s, tz=%s)",
            log.filename, c.max_size_mb, c.max_backups, c.max_age_days, c.compress, log.tz,
        )

        with log:
            for line in stdin:
                log.logf("%s", line.rstrip("\n"))
                lines += 1

        logger.info("Shut down cleanly. Total lines logged: %d", lines)
    except KeyboardInterrupt:
        logger.info("Interrupted. Total lines logged: %d", lines)
    return 0


if __name__ == "__main__":
    sys.exit(main())
