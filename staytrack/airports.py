"""
Airport reference data and location normalization.

Maps IATA codes to city and country so flights can be attributed to
countries, and resolves the free-text locations found in confirmation
emails ("Incheon (ICN)", "인천", "Paris") to airports.
"""

import re

from .countries import country_name
from .models import Airport

# code: (city, country code)
_AIRPORT_DATA = {
    # Korea
    'ICN': ('Seoul', 'KR'), 'GMP': ('Seoul', 'KR'), 'PUS': ('Busan', 'KR'),
    'CJU': ('Jeju', 'KR'),
    # Japan
    'NRT': ('Tokyo', 'JP'), 'HND': ('Tokyo', 'JP'), 'KIX': ('Osaka', 'JP'),
    'FUK': ('Fukuoka', 'JP'), 'CTS': ('Sapporo', 'JP'),
    # China / Taiwan / Hong Kong
    'PEK': ('Beijing', 'CN'), 'PVG': ('Shanghai', 'CN'), 'CAN': ('Guangzhou', 'CN'),
    'HKG': ('Hong Kong', 'HK'), 'TPE': ('Taipei', 'TW'),
    # Southeast Asia
    'SIN': ('Singapore', 'SG'), 'BKK': ('Bangkok', 'TH'), 'SGN': ('Ho Chi Minh City', 'VN'),
    'HAN': ('Hanoi', 'VN'), 'MNL': ('Manila', 'PH'), 'KUL': ('Kuala Lumpur', 'MY'),
    'CGK': ('Jakarta', 'ID'),
    # Schengen
    'CDG': ('Paris', 'FR'), 'ORY': ('Paris', 'FR'), 'NCE': ('Nice', 'FR'),
    'FRA': ('Frankfurt', 'DE'), 'MUC': ('Munich', 'DE'), 'BER': ('Berlin', 'DE'),
    'AMS': ('Amsterdam', 'NL'), 'BRU': ('Brussels', 'BE'), 'MAD': ('Madrid', 'ES'),
    'BCN': ('Barcelona', 'ES'), 'FCO': ('Rome', 'IT'), 'MXP': ('Milan', 'IT'),
    'VCE': ('Venice', 'IT'), 'ZRH': ('Zurich', 'CH'), 'GVA': ('Geneva', 'CH'),
    'VIE': ('Vienna', 'AT'), 'PRG': ('Prague', 'CZ'), 'CPH': ('Copenhagen', 'DK'),
    'ARN': ('Stockholm', 'SE'), 'OSL': ('Oslo', 'NO'), 'HEL': ('Helsinki', 'FI'),
    'LIS': ('Lisbon', 'PT'), 'ATH': ('Athens', 'GR'), 'WAW': ('Warsaw', 'PL'),
    'BUD': ('Budapest', 'HU'), 'KEF': ('Reykjavik', 'IS'), 'ZAG': ('Zagreb', 'HR'),
    # Europe (non-Schengen)
    'LHR': ('London', 'GB'), 'LGW': ('London', 'GB'), 'DUB': ('Dublin', 'IE'),
    'IST': ('Istanbul', 'TR'),
    # Americas
    'JFK': ('New York', 'US'), 'LAX': ('Los Angeles', 'US'), 'SFO': ('San Francisco', 'US'),
    'ORD': ('Chicago', 'US'), 'SEA': ('Seattle', 'US'), 'ATL': ('Atlanta', 'US'),
    'YYZ': ('Toronto', 'CA'), 'YVR': ('Vancouver', 'CA'), 'MEX': ('Mexico City', 'MX'),
    # Middle East / Oceania
    'DXB': ('Dubai', 'AE'), 'DOH': ('Doha', 'QA'), 'SYD': ('Sydney', 'AU'),
    'AKL': ('Auckland', 'NZ'),
}

AIRPORTS = {
    code: Airport(code=code, city=city, country=country_name(cc), country_code=cc)
    for code, (city, cc) in _AIRPORT_DATA.items()
}

# City name to airport code mapping (English and Korean/Japanese spellings)
CITY_TO_AIRPORT = {
    'seoul': 'ICN', 'incheon': 'ICN', '인천': 'ICN', '서울': 'ICN',
    'gimpo': 'GMP', '김포': 'GMP',
    'busan': 'PUS', '부산': 'PUS',
    'jeju': 'CJU', '제주': 'CJU',
    'tokyo': 'NRT', 'narita': 'NRT', '도쿄': 'NRT', '나리타': 'NRT', '東京': 'NRT',
    'haneda': 'HND', '하네다': 'HND',
    'osaka': 'KIX', '오사카': 'KIX', '大阪': 'KIX',
    'beijing': 'PEK', '베이징': 'PEK',
    'shanghai': 'PVG', '상하이': 'PVG',
    'hong kong': 'HKG', '홍콩': 'HKG',
    'taipei': 'TPE', '타이베이': 'TPE',
    'singapore': 'SIN', '싱가포르': 'SIN',
    'bangkok': 'BKK', '방콕': 'BKK',
    'paris': 'CDG', '파리': 'CDG',
    'frankfurt': 'FRA', '프랑크푸르트': 'FRA',
    'munich': 'MUC', '뮌헨': 'MUC',
    'berlin': 'BER', '베를린': 'BER',
    'amsterdam': 'AMS', '암스테르담': 'AMS',
    'madrid': 'MAD', '마드리드': 'MAD',
    'barcelona': 'BCN', '바르셀로나': 'BCN',
    'rome': 'FCO', '로마': 'FCO',
    'milan': 'MXP', '밀라노': 'MXP',
    'zurich': 'ZRH', '취리히': 'ZRH',
    'vienna': 'VIE', '비엔나': 'VIE',
    'prague': 'PRG', '프라하': 'PRG',
    'lisbon': 'LIS', '리스본': 'LIS',
    'london': 'LHR', '런던': 'LHR',
    'istanbul': 'IST', '이스탄불': 'IST',
    'new york': 'JFK', '뉴욕': 'JFK',
    'los angeles': 'LAX', '로스앤젤레스': 'LAX',
    'san francisco': 'SFO', '샌프란시스코': 'SFO',
    'dubai': 'DXB', '두바이': 'DXB',
    'sydney': 'SYD', '시드니': 'SYD',
}

AIRPORT_CODE_PATTERN = re.compile(r'\(([A-Z]{3})\)')


def get_airport(code):
    """Look up an airport by IATA code.

    Args:
        code: 3-letter IATA airport code (any case)

    Returns:
        Airport or None if unknown
    """
    if not code:
        return None
    return AIRPORTS.get(code.strip().upper())


def city_to_airport_code(city_name):
    """Convert a city name to its primary airport code.

    Args:
        city_name: City name string (case insensitive)

    Returns:
        Airport code string or None if not found
    """
    if not city_name:
        return None
    normalized = city_name.lower().strip()
    # Korean locations often carry a suffix like "국제공항" (international airport)
    normalized = re.sub(r'\s*(?:국제공항|공항|international airport|airport)$', '', normalized)
    return CITY_TO_AIRPORT.get(normalized)


def resolve_location(location):
    """Resolve a free-text email location to an airport.

    Tries an embedded "(ABC)" code first, then the bare text as a code,
    then the text as a city name.

    Returns:
        Airport or None
    """
    if not location:
        return None

    match = AIRPORT_CODE_PATTERN.search(location)
    if match:
        airport = get_airport(match.group(1))
        if airport:
            return airport

    stripped = AIRPORT_CODE_PATTERN.sub('', location).strip()
    if len(stripped) == 3 and stripped.isalpha() and stripped.isupper():
        airport = get_airport(stripped)
        if airport:
            return airport

    code = city_to_airport_code(stripped)
    return AIRPORTS.get(code) if code else None


def normalize_location(location):
    """Normalize a location string for display.

    Args:
        location: Raw location string from an email

    Returns:
        Tuple of (display string, airport code or None), e.g.
        ("Seoul (ICN)", "ICN") or ("Somewhere", None)
    """
    location = (location or '').strip()
    airport = resolve_location(location)
    if airport:
        return f"{airport.city} ({airport.code})", airport.code
    return location, None


def get_airport_display(code):
    """Get display string for airport code.

    Returns:
        Formatted string like "CDG (Paris)" or just the code if unknown
    """
    airport = get_airport(code)
    if airport:
        return f"{airport.code} ({airport.city})"
    return code
