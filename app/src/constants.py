"""
Application configuration and constants for GoCab API Server.

This module centralizes environment-based configuration, external service
endpoints, field limits, and other constants.

Configuration values can be overridden via environment variables.
"""

from os import environ


# ---------------------------------------------------------------------------
# Application metadata
# ---------------------------------------------------------------------------
API_TITLE = "GoCab API Server"
API_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# PostgreSQL configuration
# ---------------------------------------------------------------------------
PSQL_DB_DRIVER = environ.get("PSQL_DB_DRIVER", "postgresql")
PSQL_DB_USERNAME = environ.get("PSQL_DB_USERNAME", "postgres")
PSQL_DB_PORT = environ.get("PSQL_DB_PORT", "5432")
PSQL_DB_PASSWORD = environ.get("PSQL_DB_PASSWORD", "password")
PSQL_DB_HOST = environ.get("PSQL_DB_HOST", "localhost")
PSQL_DB_NAME = environ.get("PSQL_DB_NAME", "postgres")


# ---------------------------------------------------------------------------
# OpenObserve configuration
# ---------------------------------------------------------------------------
OPENOBSERVE_ENABLED = environ.get("OPENOBSERVE_ENABLED", "false").lower() == "true"
OPENOBSERVE_PROTOCOL = environ.get("OPENOBSERVE_PROTOCOL", "http")
OPENOBSERVE_HOST = environ.get("OPENOBSERVE_HOST", "localhost")
OPENOBSERVE_PORT = environ.get("OPENOBSERVE_PORT", "5080")
OPENOBSERVE_USERNAME = environ.get("OPENOBSERVE_USERNAME", "admin@gocab.in")
OPENOBSERVE_PASSWORD = environ.get("OPENOBSERVE_PASSWORD", "password")
OPENOBSERVE_ORG = environ.get("OPENOBSERVE_ORG", "gocab")
OPENOBSERVE_STREAM = environ.get("OPENOBSERVE_STREAM", "gocab-core-server")
OPENOBSERVE_TIMEOUT = 5  # Event shipping timeout (in seconds)


# ---------------------------------------------------------------------------
# Location services (geocoding and road distance)
# ---------------------------------------------------------------------------
GEOCODER_URL = environ.get(
    "GEOCODER_URL", "https://nominatim.openstreetmap.org/search"
)
GEOCODER_USER_AGENT = environ.get("GEOCODER_USER_AGENT", "gocab-core-server/1.0")
OSRM_URL = environ.get("OSRM_URL", "https://router.project-osrm.org")
OSRM_PROFILE = environ.get("OSRM_PROFILE", "driving")
LOCATION_SERVICE_TIMEOUT = float(environ.get("LOCATION_SERVICE_TIMEOUT", "10"))


# ---------------------------------------------------------------------------
# Field limits
# ---------------------------------------------------------------------------
MAX_IDENTITY_LENGTH = 128
MAX_NAME_LENGTH = 64
MAX_EMAIL_LENGTH = 256
MAX_CODE_LENGTH = 32  # Government ids, licence and plate numbers
MAX_ADDRESS_LENGTH = 512
MAX_COST_PER_KM = 9999.99  # Numeric(6, 2)
MAX_SEATER_COUNT = 60


# ---------------------------------------------------------------------------
# Ride search
# ---------------------------------------------------------------------------
DEFAULT_CITY = "Unknown"  # current_city of drivers that did not declare one
