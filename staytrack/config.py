"""
Configuration and stay file persistence.
"""

import json
import logging
from datetime import date
from pathlib import Path

from .countries import DEFAULT_SCHENGEN_COUNTRIES, normalize_country_codes
from .errors import ConfigError
from .models import StayPeriod, TravelPurpose
from .periods import BuildMode
from .scoring import DEFAULT_CONFIDENCE_THRESHOLD

logger = logging.getLogger(__name__)

# Default paths (can be overridden)
_DATA_DIR = Path(__file__).parent.parent
CONFIG_FILE = _DATA_DIR / "config.json"
STAYS_FILE = _DATA_DIR / "stays.json"

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def default_config():
    return {
        'confidence_threshold': DEFAULT_CONFIDENCE_THRESHOLD,
        'schengen_countries': sorted(DEFAULT_SCHENGEN_COUNTRIES),
        'period_mode': BuildMode.TRIP_GROUPING.value,
        'home_country': None,
        'log_level': 'INFO',
    }


def validate_config(config):
    """Check and normalize a config dict in place.

    Raises:
        ConfigError: if any value is unusable
    """
    threshold = config.get('confidence_threshold')
    if not isinstance(threshold, (int, float)) or isinstance(threshold, bool) or not 0 <= threshold <= 1:
        raise ConfigError(f"confidence_threshold must be a number between 0 and 1, got {threshold!r}")

    countries = config.get('schengen_countries')
    if not isinstance(countries, (list, tuple)) or not normalize_country_codes(countries):
        raise ConfigError("schengen_countries must be a non-empty list of country codes")
    config['schengen_countries'] = sorted(normalize_country_codes(countries))

    mode = config.get('period_mode')
    if mode not in [m.value for m in BuildMode]:
        raise ConfigError(f"period_mode must be 'single' or 'trip', got {mode!r}")

    home = config.get('home_country')
    if home is not None and not isinstance(home, str):
        raise ConfigError(f"home_country must be a country code, got {home!r}")
    config['home_country'] = home.strip().upper() if home else None

    level = str(config.get('log_level', 'INFO')).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    config['log_level'] = level

    return config


def load_config(config_file=None):
    """Load configuration from file.

    Args:
        config_file: Path to config file. Defaults to config.json.

    Returns:
        Config dict; defaults when the file does not exist.

    Raises:
        ConfigError: if the file is corrupt or holds invalid values
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config_path = Path(config_file)
    if not config_path.exists():
        logger.debug(f"No config at {config_path}, using defaults")
        return default_config()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path.name} is corrupted: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path.name} must hold a JSON object")

    # Set defaults for optional fields
    for key, value in default_config().items():
        config.setdefault(key, value)

    return validate_config(config)


def save_config(config, config_file=None):
    """Save configuration to file.

    Args:
        config: Config dict to save.
        config_file: Path to config file. Defaults to config.json.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


# ============================================================================
# STAY FILES
# ============================================================================

def stay_to_dict(stay):
    return {
        'country': stay.country_code,
        'entry_date': stay.entry_date.isoformat(),
        'exit_date': stay.exit_date.isoformat() if stay.exit_date else None,
        'purpose': stay.purpose.value,
        'notes': stay.notes,
        'confidence': stay.confidence,
    }


def stay_from_dict(data):
    """Build a StayPeriod from a stay file entry.

    Raises:
        ConfigError: on missing fields or bad dates
    """
    try:
        country = data['country']
        entry = date.fromisoformat(data['entry_date'])
        exit_date = date.fromisoformat(data['exit_date']) if data.get('exit_date') else None
        purpose = TravelPurpose(data.get('purpose', TravelPurpose.OTHER.value))
        return StayPeriod.between(
            country,
            entry,
            exit_date,
            purpose=purpose,
            notes=data.get('notes', ''),
            confidence=float(data.get('confidence', 1.0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid stay entry {data!r}: {e}") from e


def load_stays(stays_file=None):
    """Load stays from a JSON list.

    Returns:
        List of StayPeriod; empty when the file does not exist.
    """
    if stays_file is None:
        stays_file = STAYS_FILE

    stays_path = Path(stays_file)
    if not stays_path.exists():
        return []

    try:
        with open(stays_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{stays_path.name} is corrupted: {e}") from e

    if not isinstance(data, list):
        raise ConfigError(f"{stays_path.name} must hold a JSON list of stays")

    return [stay_from_dict(entry) for entry in data]


def save_stays(stays, stays_file=None):
    """Save stays with atomic write for crash protection.

    Args:
        stays: Iterable of StayPeriod
        stays_file: Path to stays file. Defaults to stays.json.
    """
    if stays_file is None:
        stays_file = STAYS_FILE

    stays_path = Path(stays_file)
    save_data = [stay_to_dict(stay) for stay in stays]

    # Write to temp file first, then rename (atomic operation)
    temp_file = stays_path.with_suffix('.json.tmp')
    try:
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(save_data, f, indent=2, ensure_ascii=False)
        temp_file.replace(stays_path)
    except OSError:
        if temp_file.exists():
            temp_file.unlink()
        raise
