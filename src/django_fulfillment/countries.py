"""Destination countries the vendor ships to."""

from typing import Optional

from .conf import get_country_lookup

SUPPORTED_COUNTRIES = frozenset([
    "Argentina", "Australia", "Austria", "Belgium", "Brazil", "Bulgaria",
    "Canada", "China", "Cyprus", "Czech Republic", "Denmark", "Estonia",
    "Finland", "France", "Germany", "Gibraltar", "Greece", "Greenland",
    "Hong Kong", "Hungary", "Iceland", "Ireland", "Israel", "Italy", "Japan",
    "Latvia", "Liechtenstein", "Lithuania", "Luxembourg", "Mexico",
    "Netherlands", "New Zealand", "Norway", "Poland", "Portugal", "Romania",
    "Russia", "Singapore", "Slovakia", "Slovenia", "Spain", "Sweden",
    "Switzerland", "Taiwan", "Turkey", "Ukraine", "United Kingdom",
    "United States", "Vatican City", "Yugoslavia",
])

# Host country titles that differ from the vendor's spelling
VENDOR_ALIASES = {
    "Hong Kong SAR": "Hong Kong",
    "Czechia": "Czech Republic",
    "Russian Federation": "Russia",
    "Holy See (Vatican City State)": "Vatican City",
}

ISO_COUNTRY_TITLES = {
    "AR": "Argentina",
    "AU": "Australia",
    "AT": "Austria",
    "BE": "Belgium",
    "BR": "Brazil",
    "BG": "Bulgaria",
    "CA": "Canada",
    "CN": "China",
    "CY": "Cyprus",
    "CZ": "Czech Republic",
    "DK": "Denmark",
    "EE": "Estonia",
    "FI": "Finland",
    "FR": "France",
    "DE": "Germany",
    "GI": "Gibraltar",
    "GR": "Greece",
    "GL": "Greenland",
    "HK": "Hong Kong SAR",
    "HU": "Hungary",
    "IS": "Iceland",
    "IE": "Ireland",
    "IL": "Israel",
    "IT": "Italy",
    "JP": "Japan",
    "LV": "Latvia",
    "LI": "Liechtenstein",
    "LT": "Lithuania",
    "LU": "Luxembourg",
    "MX": "Mexico",
    "NL": "Netherlands",
    "NZ": "New Zealand",
    "NO": "Norway",
    "PL": "Poland",
    "PT": "Portugal",
    "RO": "Romania",
    "RU": "Russia",
    "SG": "Singapore",
    "SK": "Slovakia",
    "SI": "Slovenia",
    "ES": "Spain",
    "SE": "Sweden",
    "CH": "Switzerland",
    "TW": "Taiwan",
    "TR": "Turkey",
    "UA": "Ukraine",
    "GB": "United Kingdom",
    "US": "United States",
    "VA": "Vatican City",
}


def iso_country_title(code: str) -> Optional[str]:
    """Default country lookup: ISO 3166 alpha-2 code -> country title."""
    return ISO_COUNTRY_TITLES.get((code or "").upper())


def vendor_country_name(code: str) -> Optional[str]:
    """
    Resolve a country code to the vendor's country name.

    Args:
        code: Country code as stored on the invoice

    Returns:
        Vendor country name, or None if blank or not shipped to
    """
    if not code:
        return None

    title = get_country_lookup()(code)
    if not title:
        return None

    title = VENDOR_ALIASES.get(title, title)
    if title in SUPPORTED_COUNTRIES:
        return title
    return None
