# Imports
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from imagelinks_catalog.exceptions import (
    InvalidFormatError,
    NotFoundError,
    StorageUnavailableError,
)
from imagelinks_catalog.kv import JsonFileKeyValueStore
from imagelinks_catalog.mutations import MutationEngine
from imagelinks_catalog.queries import tag_counts
from imagelinks_catalog.store import CatalogStore
from imagelinks_catalog.sweep import HttpProber, LivenessSweep
from imagelinks_core.config import Settings

# Logger
logger = logging.getLogger(__name__)


# Commands
def _cmd_sweep(settings: Settings, store: CatalogStore, args: argparse.Namespace) -> int:
    with HttpProber(timeout=settings.probe_timeout, pool_size=settings.sweep_max_concurrency) as prober:
        sweep = LivenessSweep(
            store,
            prober,
            max_concurrency=settings.sweep_max_concurrency,
            probe_timeout=settings.probe_timeout,
        )
        result = asyncio.run(sweep.run())
    logger.info(result.message)
    return 0


def _cmd_import(settings: Settings, store: CatalogStore, args: argparse.Namespace) -> int:
    try:
        with open(args.file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidFormatError(f"Cannot read {args.file}: {e}") from e

    engine = MutationEngine(store)
    result = engine.append_unique(payload) if args.append else engine.replace_all(payload)
    logger.info(result.message)
    return 0


def _cmd_export(settings: Settings, store: CatalogStore, args: argparse.Namespace) -> int:
    document = store.export_document()
    if args.output:
        Path(args.output).write_text(document, encoding="utf-8")
        logger.info(f"Exported catalog to {args.output}")
    else:
        sys.stdout.write(document + "\n")
    return 0


def _cmd_stats(settings: Settings, store: CatalogStore, args: argparse.Namespace) -> int:
    records = store.load_catalog()
    logger.info(f"Links: {len(records)} | Hits: {store.load_hit_counter()}")
    for tag, count in tag_counts(records):
        logger.info(f"  #{tag}: {count}")
    return 0


COMMANDS = {
    "sweep": _cmd_sweep,
    "import": _cmd_import,
    "export": _cmd_export,
    "stats": _cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Image link catalog maintenance")
    parser.add_argument("-s", "--store", help="Path of the JSON store file")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("sweep", help="Remove unreachable links (for cron)")

    imp = sub.add_parser("import", help="Load links from a JSON array file")
    imp.add_argument("file", help="JSON file with link records")
    imp.add_argument("-a", "--append", action="store_true", help="Append instead of replacing")

    exp = sub.add_parser("export", help="Write the catalog JSON")
    exp.add_argument("-o", "--output", help="Output file (stdout by default)")

    sub.add_parser("stats", help="Show link and tag counts")
    return parser


# Execution
def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )

    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        overrides = {"store_path": args.store} if args.store else {}
        settings = Settings(**overrides)
        store = CatalogStore(JsonFileKeyValueStore(settings.store_path))
        return COMMANDS[args.command](settings, store, args)

    except KeyboardInterrupt:
        logger.info("\nInterrupted")
        return 130
    except InvalidFormatError as e:
        logger.error(f"Invalid input: {e}")
        return 2
    except NotFoundError as e:
        logger.error(f"Not found: {e}")
        return 3
    except StorageUnavailableError as e:
        logger.error(f"Storage unavailable: {e}")
        return 4
    except ValidationError as e:
        logger.error(f"Configuration error: {e}")
        return 5
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
