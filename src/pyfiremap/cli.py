"""Command-line front end.

``watch`` keeps an HTML map in sync with the backend; ``predict`` scores a
single address and writes the updated map.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pyfiremap.app import FireMapApp
from pyfiremap.config import FireMapConfig
from pyfiremap.exceptions import FireMapError
from pyfiremap.map_provider import FoliumMapProvider
from pyfiremap.state.events import StoreChange

_logger = logging.getLogger(__name__)


class StderrNotifier:
    """Alerts are printed to stderr, where a terminal user will see them."""

    def alert(self, message: str) -> None:
        print(message, file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyfiremap",
        description="Render fire-risk predictions from the backend as a heat map.",
    )
    parser.add_argument("--output", "-o", default="firemap.html", help="HTML file the map is written to")
    parser.add_argument("--backend-url", help="Backend base URL (default: $FIREMAP_BACKEND_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Refresh predictions periodically and rewrite the map")
    watch.add_argument("--interval", type=float, help="Seconds between refreshes (default: 10)")
    watch.add_argument("--once", action="store_true", help="Fetch once, write the map and exit")

    predict = sub.add_parser("predict", help="Request a prediction for one address")
    predict.add_argument("address", help="Street address to score")
    return parser


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.backend_url:
        overrides["backend_url"] = args.backend_url
    if getattr(args, "interval", None) is not None:
        overrides["refresh_interval"] = args.interval
    config = FireMapConfig.from_env(**overrides)

    provider = FoliumMapProvider(config)
    output = Path(args.output)

    def write_map(change: StoreChange) -> None:
        provider.save(output)
        _logger.info(
            "Wrote %d predictions to %s (%s #%d)",
            len(change.predictions),
            output,
            change.source,
            change.sequence,
        )

    async with FireMapApp(config, provider=provider, notifier=StderrNotifier(), on_render=write_map) as app:
        if args.command == "predict":
            await app.start(periodic=False)
            prediction = await app.submit_one(args.address)
            if prediction is None:
                return 1
            print(
                f"{prediction.address}: vegetation={prediction.vegetation_score} "
                f"structure={prediction.structure_score} hazard={prediction.hazard_score}"
            )
            return 0

        if args.once:
            await app.start(periodic=False)
            # Written even when the fetch failed, so the canvas always exists.
            provider.save(output)
            return 0

        await app.run_forever()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        return asyncio.run(_run(args))
    except FireMapError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130
