"""Static code -> display name lookup tables.

`CodeMapper` wraps an immutable mapping of short codes (venue codes, NOC-style
country codes) to display names. Lookups normalise the input (trim, upper-case)
and pass unknown codes through unchanged, so an unmapped code still shows up in
the published schedule instead of disappearing.

Mappers are handed to the normalizer at construction; alternate code sets can be
substituted via `CodeMapper.from_mapping()` or `with_overrides()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

DEFAULT_VENUE_CODES: Mapping[str, str] = MappingProxyType(
    {
        "CCU": "Milano",
        "SSC": "Cortina",
        "CSC": "Cortina",
        "PSJ": "Cortina",
        "LSP": "Livigno",
        "BFS": "Bormio",
        "ANS": "Anterselva",
        "MSI": "Milano",
        "IHM": "Milano",
        "SSL": "Milano",
    }
)

DEFAULT_COUNTRY_CODES: Mapping[str, str] = MappingProxyType(
    {
        "GER": "Germany", "KOR": "Korea", "NOR": "Norway", "CZE": "Czechia",
        "SUI": "Switzerland", "UKR": "Ukraine", "EST": "Estonia", "SWE": "Sweden",
        "USA": "United States", "CAN": "Canada", "GBR": "Great Britain", "ITA": "Italy",
        "FRA": "France", "AUT": "Austria", "SLO": "Slovenia", "JPN": "Japan",
        "CHN": "China", "NZL": "New Zealand", "AUS": "Australia", "FIN": "Finland",
        "RUS": "ROC", "KAZ": "Kazakhstan", "POL": "Poland", "BLR": "Belarus",
        "LAT": "Latvia", "LTU": "Lithuania", "DEN": "Denmark", "NED": "Netherlands",
        "BEL": "Belgium", "IRL": "Ireland", "ESP": "Spain", "POR": "Portugal",
        "BRA": "Brazil", "ARG": "Argentina", "MEX": "Mexico", "RSA": "South Africa",
        "PHI": "Philippines", "TPE": "Chinese Taipei", "HKG": "Hong Kong", "INA": "Indonesia",
        "MAS": "Malaysia", "SIN": "Singapore", "THA": "Thailand", "VIE": "Vietnam",
        "IND": "India", "PAK": "Pakistan", "BGD": "Bangladesh", "SRI": "Sri Lanka",
        "NEP": "Nepal", "MGL": "Mongolia", "QAT": "Qatar", "UAE": "UAE",
        "KSA": "Saudi Arabia", "TUR": "Turkey", "ISR": "Israel", "EGY": "Egypt",
        "MAR": "Morocco", "TUN": "Tunisia", "ALG": "Algeria", "NGA": "Nigeria",
        "GHA": "Ghana", "SEN": "Senegal", "CAM": "Cambodia", "JOR": "Jordan",
        "LBN": "Lebanon", "SYR": "Syria", "IRQ": "Iraq", "KUW": "Kuwait",
        "OMA": "Oman", "BHR": "Bahrain", "ISL": "Iceland", "LUX": "Luxembourg",
        "MON": "Monaco", "AND": "Andorra", "SMR": "San Marino", "MLT": "Malta",
        "CYP": "Cyprus", "ARM": "Armenia", "GEO": "Georgia", "AZE": "Azerbaijan",
        "KOS": "Kosovo", "MKD": "North Macedonia", "ALB": "Albania", "BIH": "Bosnia",
        "MNE": "Montenegro", "SRB": "Serbia", "CRO": "Croatia", "SVK": "Slovakia",
        "BUL": "Bulgaria", "ROM": "Romania", "HUN": "Hungary",
    }
)


def _normalize_code(value: str) -> str:
    return value.strip().upper()


@dataclass(frozen=True)
class CodeMapper:
    """Immutable code -> display name mapper with pass-through for unknown codes.

    Attributes
    -----------
    mappings: Mapping[str, str]
        Normalised (upper-case) code -> display name.
    label: str
        Domain label (e.g. "venues") for easier debugging.
    """

    mappings: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    label: str = ""

    # ---------------------------- Construction helpers ----------------------------
    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str], label: str = "") -> "CodeMapper":
        normalised = {_normalize_code(k): v for k, v in mapping.items() if k and k.strip()}
        return cls(mappings=MappingProxyType(normalised), label=label)

    @classmethod
    def default_venue_mapper(cls) -> "CodeMapper":
        return cls.from_mapping(DEFAULT_VENUE_CODES, label="venues")

    @classmethod
    def default_country_mapper(cls) -> "CodeMapper":
        return cls.from_mapping(DEFAULT_COUNTRY_CODES, label="countries")

    def with_overrides(self, overrides: Mapping[str, str]) -> "CodeMapper":
        """Return a new mapper with *overrides* layered on top of this one."""
        merged = dict(self.mappings)
        merged.update({_normalize_code(k): v for k, v in overrides.items()})
        return CodeMapper(mappings=MappingProxyType(merged), label=self.label)

    # ---------------------------- Lookup ----------------------------
    def lookup(self, code: Optional[str]) -> Optional[str]:
        """Display name for *code*, or None when the code is unknown."""
        if not code:
            return None
        return self.mappings.get(_normalize_code(code))

    def resolve(self, code: str) -> str:
        """Display name for *code*; unknown codes are returned unchanged."""
        return self.lookup(code) or code

    def resolve_joined(self, codes: Iterable[str], sep: str = " vs ") -> str:
        return sep.join(self.resolve(c.strip()) for c in codes if c and c.strip())


__all__ = [
    "CodeMapper",
    "DEFAULT_VENUE_CODES",
    "DEFAULT_COUNTRY_CODES",
]
