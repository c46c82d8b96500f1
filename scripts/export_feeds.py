#!/usr/bin/env python3
"""Exporta todos os feeds Twikey para um CSV (uma linha por evento).

Uso:
    TWIKEY_API_KEY=... python scripts/export_feeds.py --start 0

Requer TWIKEY_API_KEY (e opcionalmente TWIKEY_URL, TWIKEY_PRIVATE_KEY).
O arquivo é removido se nenhum evento for exportado.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
from datetime import UTC, datetime
from pathlib import Path

from twikey import FeedOptions, create_client
from twikey.config.logging import configure_logging, get_logger
from twikey.feeds import ALL_FEEDS, DOCUMENT_FEED, classify_document_event
from twikey.observability import walk_context

logger = get_logger(__name__)


def _event_row(feed_name: str, entry: dict[str, object], exported_at: str) -> list[str]:
    if feed_name == DOCUMENT_FEED.name:
        kind = classify_document_event(entry).value
        mandate = entry.get("Mndt") or {}
        reference = entry.get("OrgnlMndtId") or (
            mandate.get("MndtId", "") if isinstance(mandate, dict) else ""
        )
        return [
            str(entry.get("EvtTime", exported_at)),
            feed_name,
            kind,
            str(entry.get("EvtId", "")),
            str(reference),
        ]

    return [
        exported_at,
        feed_name,
        "update",
        str(entry.get("seq", "")),
        str(entry.get("ref", "") or entry.get("id", "")),
        str(entry.get("state", "")),
    ]


async def export_feeds(output: Path, start: int | None) -> int:
    exported = 0
    async with create_client() as client:
        with output.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle, delimiter=";")
            for endpoint in ALL_FEEDS:
                exported_at = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
                options = FeedOptions(start=start, includes=("seq",))
                with walk_context(endpoint.name):
                    count = 0
                    async for entry in client.feed(endpoint, options):
                        writer.writerow(_event_row(endpoint.name, entry, exported_at))
                        count += 1
                    logger.info("feed_exported", extra={"entries": count})
                exported += count
    return exported


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=int, default=None, help="retomar após esta sequence")
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    configure_logging(level=args.log_level, service_name="twikey_export")
    output = args.output or Path(f"{datetime.now(UTC).strftime('%Y-%m-%dT%H-%M-%SZ')}.csv")

    exported = asyncio.run(export_feeds(output, args.start))
    if exported == 0:
        output.unlink(missing_ok=True)
    print(f"exported={exported} file={output if exported else '-'}")


if __name__ == "__main__":
    main()
