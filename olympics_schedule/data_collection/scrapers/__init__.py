"""
Data Collection Scrapers Package

Note: avoid importing scraper modules at package import time so that the pure
extraction modules stay importable without a browser stack. Import concrete
scrapers from their modules directly, e.g.:

    from olympics_schedule.data_collection.scrapers.olympics_scraper import OlympicsScheduleScraper
"""

__all__ = []
