"""
Apps Module
Kommandozeilen-Einstiegspunkte
"""

__all__: list[str] = []
