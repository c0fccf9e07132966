#!/usr/bin/env python3
"""Reset document number sequences to 0 so numbering restarts from 1.

Only run this after the documents that used those numbers are gone,
otherwise numbers will be issued twice.
"""
import argparse
import asyncio

# Load .env file
from dotenv import load_dotenv
load_dotenv()

from fruttagest.config import Settings
from fruttagest.numbering.store import SqlSequenceStore
from fruttagest.storage.database import AsyncSessionLocal, close_db, get_session_factory, init_db
from fruttagest.storage.repositories import NumberSequenceRepo
from fruttagest.utils.logging import setup_logging


async def main(year: int | None, dry_run: bool) -> None:
    settings = Settings()
    init_db(settings.database_url.get_secret_value())
    try:
        async with AsyncSessionLocal() as session:
            sequences = await NumberSequenceRepo(session).list_all()

        targets = [s for s in sequences if year is None or s.year == year]
        for seq in targets:
            print(f"  {seq.type:<18} {seq.year}  {seq.prefix:<8} last={seq.last_number}")

        if not targets:
            print("No sequences to reset.")
            return
        if dry_run:
            print(f"\n{len(targets)} sequence(s) would be reset (dry run).")
            return

        count = await SqlSequenceStore(get_session_factory()).reset(year)
        print(f"\n{count} sequence(s) reset to 0.")
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reset document number sequences")
    parser.add_argument("--year", type=int, help="Only reset sequences of this year")
    parser.add_argument("--dry-run", action="store_true", help="List sequences without changing them")
    args = parser.parse_args()

    setup_logging("INFO", json_output=False)
    asyncio.run(main(args.year, args.dry_run))
