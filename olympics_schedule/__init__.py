"""
Olympics Schedule Pipeline
Extraktion, Normalisierung und Aggregation des Wettkampfplans
"""

__version__ = "1.0.0"
__author__ = "Sports Data Team"

# NOTE:
# Avoid importing heavy modules (like configuration or Playwright) at package
# import time so the pure extraction code stays importable in unit tests.

__all__ = []
