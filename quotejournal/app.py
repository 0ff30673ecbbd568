#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Console entrypoint for QuoteJournal.

This file is intentionally minimal. It prints the quote of the day using the
configured stores and exits.
"""
from __future__ import annotations

from typing import Dict, List, Optional
import argparse
import asyncio
import logging
import sys

from quotejournal.logic import Journal, load_config
from quotejournal.quotes import QuoteUnavailableError


async def _show_quote(cfg: Dict[str, object], refresh: bool) -> int:
    async with Journal.from_config(cfg) as journal:
        try:
            if refresh:
                quote = await journal.quotes.refresh_quote()
            else:
                quote = await journal.quotes.get_quote_for_display()
        except QuoteUnavailableError as exc:
            print(f"No quote available: {exc}", file=sys.stderr)
            return 1
    star = " *" if quote.is_favorite else ""
    print(f"\"{quote.text}\" - {quote.author}{star}")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Print today's quote; ``--refresh`` forces a new one."""
    parser = argparse.ArgumentParser(prog="quotejournal", description=__doc__.splitlines()[0])
    parser.add_argument("--refresh", action="store_true", help="fetch a new quote now")
    args = parser.parse_args(argv)

    cfg = load_config()
    logging.basicConfig(level=str(cfg.get("log_level") or "WARNING").upper())
    sys.exit(asyncio.run(_show_quote(cfg, args.refresh)))


if __name__ == "__main__":
    main()
