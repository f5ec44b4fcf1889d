"""CLI entry point for scanlens."""

import argparse
import logging
import os

import scanlens.io.logging_setup
from scanlens.config import load_config
from scanlens.demo import DemoApp, DemoTree
from scanlens.geometry.persistence import GeometryStore
from scanlens.io.storage import JsonFileStorage

logger = logging.getLogger(__name__)


def _reset_layout(config) -> int:
    store = GeometryStore(JsonFileStorage(config.storage_path))
    store.clear()
    if not store.available:
        print(f"Could not clear panel layout at {config.storage_path}")
        return 1
    print(f"Cleared panel layout at {config.storage_path}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Live component inspector")
    sub = parser.add_subparsers(dest="command")
    demo = sub.add_parser("demo", help="Run the inspector over a built-in demo tree")
    demo.add_argument("--seed", type=int, default=None, help="Random seed for demo re-renders")
    sub.add_parser("reset-layout", help="Forget the stored panel position and size")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: SCANLENS_LOG_LEVEL or INFO)",
    )
    args = parser.parse_args(argv)

    if args.log_level:
        os.environ["SCANLENS_LOG_LEVEL"] = args.log_level
    # The Textual app owns the terminal; log to file only.
    runtime = scanlens.io.logging_setup.configure(stream=False)
    logger.info("Logging to %s at %s", runtime.file_path, runtime.level_name)

    config = load_config(default_metrics="cells")

    if args.command == "reset-layout":
        return _reset_layout(config)

    if args.command in (None, "demo"):
        seed = getattr(args, "seed", None)
        DemoApp(DemoTree(seed=seed), config=config).run()
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
