#!/usr/bin/env python3
"""Parse an order message (text and/or photo) against the product catalog."""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Load .env file
from dotenv import load_dotenv
load_dotenv()

from fruttagest.config import Settings
from fruttagest.services import OrderIntakeService, build_interpreter
from fruttagest.storage.database import close_db, get_session_factory, init_db
from fruttagest.utils.logging import setup_logging


async def main(text: str, image_path: str | None) -> None:
    settings = Settings()
    init_db(settings.database_url.get_secret_value())
    intake = OrderIntakeService(build_interpreter(settings), get_session_factory())

    image = None
    if image_path:
        path = Path(image_path)
        if not path.exists():
            print(f"Error: File not found: {image_path}")
            sys.exit(1)
        image = path.read_bytes()

    try:
        result = await intake.parse_text(text, image)
    finally:
        await close_db()

    if result.extraction_failed:
        print("Extraction failed, nothing was parsed. Original text:")
        print(result.raw_text)
        sys.exit(2)

    for item in result.items:
        marker = item.product_id or "??"
        print(f"{item.quantity:g} {item.unit or '-':<10} {item.product_name:<30} -> {marker}")
    if result.customer_name:
        print(f"\nCustomer: {result.customer_name}")
    if result.delivery_date:
        print(f"Delivery: {result.delivery_date}")
    if result.notes:
        print(f"Notes: {result.notes}")

    print()
    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("text", nargs="?", default="", help="Order text; reads stdin when omitted")
    parser.add_argument("--image", help="Path to a photo of the order")
    args = parser.parse_args()

    order_text = args.text or ("" if sys.stdin.isatty() else sys.stdin.read())
    if not order_text.strip() and not args.image:
        parser.error("provide order text or --image")

    setup_logging("WARNING", json_output=False)
    asyncio.run(main(order_text, args.image))
