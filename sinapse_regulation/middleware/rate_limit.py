"""Rate limiting middleware using SlowAPI."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from sinapse_regulation.config import get_settings

limiter = Limiter(key_func=get_remote_address)

_settings = get_settings()
CARE_TEAM_RATE_LIMIT = _settings.care_team_rate_limit
NIR_RATE_LIMIT = _settings.nir_rate_limit
HEALTH_RATE_LIMIT = _settings.health_rate_limit
