"""
Data Collection Module
Extraktion, Normalisierung, Capture-Aggregation und Scraper

Note: do not import submodules here to keep package import side-effect free.
Import needed classes directly from their modules.
"""

__all__: list[str] = []
