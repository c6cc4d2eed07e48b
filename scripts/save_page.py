"""
Simple script to save the rendered schedule HTML for offline extraction

Usage:
  python scripts/save_page.py
  python scripts/save_page.py --url https://www.olympics.com/en/milano-cortina-2026/schedule --out logs
"""

import argparse
import asyncio
import os
from datetime import datetime

from olympics_schedule.common.playwright_utils import FetchOptions, PlaywrightFetchError, fetch_page
from olympics_schedule.core.config import settings


async def save_page(url: str, output_dir: str) -> int:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, f"schedule_snapshot_{timestamp}.html")

    print("Loading page...")
    try:
        content = await fetch_page(
            FetchOptions(
                url=url,
                wait_until=settings.wait_until,
                timeout_ms=settings.navigation_timeout_ms,
                headless=settings.headless,
                user_agent=settings.user_agent,
                locale=settings.locale,
                viewport=settings.viewport,
            )
        )
    except PlaywrightFetchError as e:
        print(f"Error: {str(e)}")
        return 1

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    print(f"\nPage saved to: {output_file}")
    print(f"Extract with: python -m olympics_schedule.apps.cli extract {output_file}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Save rendered schedule markup")
    parser.add_argument("--url", default=settings.schedule_url)
    parser.add_argument("--out", default="logs")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(save_page(args.url, args.out)))
