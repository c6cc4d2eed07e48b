"""
Olympics Schedule Pipeline - Hauptanwendung

Zentraler Einstiegspunkt; delegiert an die click-CLI.
"""

import asyncio
import sys

# Windows-specific asyncio policy to avoid 'Event loop is closed' and transport warnings
if sys.platform.startswith("win"):
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    except Exception:
        pass

from olympics_schedule.apps.cli import main

if __name__ == "__main__":
    main()
