"""
Country reference data.

ISO 3166-1 alpha-2 codes with display names, and the default set of
Schengen member states. Membership changes over time, so callers pass
their own set to the compliance calculator; this is only the default.
"""

# Schengen Area members (29 countries as of 2025)
DEFAULT_SCHENGEN_COUNTRIES = frozenset({
    'AT', 'BE', 'BG', 'HR', 'CZ', 'DK', 'EE', 'FI', 'FR', 'DE',
    'GR', 'HU', 'IS', 'IT', 'LV', 'LI', 'LT', 'LU', 'MT', 'NL',
    'NO', 'PL', 'PT', 'RO', 'SK', 'SI', 'ES', 'SE', 'CH',
})

COUNTRY_NAMES = {
    # Schengen
    'AT': 'Austria', 'BE': 'Belgium', 'BG': 'Bulgaria', 'HR': 'Croatia',
    'CZ': 'Czech Republic', 'DK': 'Denmark', 'EE': 'Estonia', 'FI': 'Finland',
    'FR': 'France', 'DE': 'Germany', 'GR': 'Greece', 'HU': 'Hungary',
    'IS': 'Iceland', 'IT': 'Italy', 'LV': 'Latvia', 'LI': 'Liechtenstein',
    'LT': 'Lithuania', 'LU': 'Luxembourg', 'MT': 'Malta', 'NL': 'Netherlands',
    'NO': 'Norway', 'PL': 'Poland', 'PT': 'Portugal', 'RO': 'Romania',
    'SK': 'Slovakia', 'SI': 'Slovenia', 'ES': 'Spain', 'SE': 'Sweden',
    'CH': 'Switzerland',
    # Europe (non-Schengen)
    'GB': 'United Kingdom', 'IE': 'Ireland', 'CY': 'Cyprus', 'TR': 'Turkey',
    'AL': 'Albania', 'RS': 'Serbia', 'ME': 'Montenegro', 'MK': 'North Macedonia',
    'BA': 'Bosnia and Herzegovina', 'UA': 'Ukraine', 'MC': 'Monaco',
    # Asia Pacific
    'KR': 'South Korea', 'JP': 'Japan', 'CN': 'China', 'HK': 'Hong Kong',
    'TW': 'Taiwan', 'SG': 'Singapore', 'TH': 'Thailand', 'VN': 'Vietnam',
    'PH': 'Philippines', 'MY': 'Malaysia', 'ID': 'Indonesia', 'IN': 'India',
    'AU': 'Australia', 'NZ': 'New Zealand',
    # Americas
    'US': 'United States', 'CA': 'Canada', 'MX': 'Mexico', 'BR': 'Brazil',
    'AR': 'Argentina', 'CL': 'Chile', 'CO': 'Colombia', 'PE': 'Peru',
    # Middle East & Africa
    'AE': 'United Arab Emirates', 'QA': 'Qatar', 'IL': 'Israel', 'EG': 'Egypt',
    'MA': 'Morocco', 'ZA': 'South Africa',
}


def country_name(code):
    """Get the display name for a country code, or the code itself if unknown."""
    if not code:
        return "Unknown"
    return COUNTRY_NAMES.get(code.upper(), code.upper())


def normalize_country_codes(codes):
    """Normalize an iterable of country codes to an uppercase frozenset."""
    return frozenset(code.strip().upper() for code in codes if code and code.strip())
