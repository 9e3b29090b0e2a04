# config.py

import os
from dataclasses import dataclass
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool = False) -> bool:
	"""Read a boolean value from environment variables."""
	raw = os.getenv(name)
	if raw is None:
		return default
	return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
	"""Read an integer value from environment variables."""
	raw = os.getenv(name)
	if raw is None:
		return default
	try:
		return int(raw)
	except ValueError:
		return default


@dataclass(frozen=True)
class Settings:
	"""Central application settings loaded from environment variables."""

	# App / Flask
	host: str = os.getenv("GEOIP_PLS_HOST", "0.0.0.0")
	port: int = _env_int("GEOIP_PLS_PORT", 8080)
	flask_debug: bool = _env_bool("GEOIP_PLS_DEBUG", False)
	log_level: str = os.getenv("GEOIP_PLS_LOG_LEVEL", "INFO")

	# Where the per-request context comes from: headers, environ or geoip2
	context_source: str = os.getenv("GEOIP_PLS_CONTEXT_SOURCE", "headers")

	# Number of X-Forwarded-For hops set by trusted proxies
	trusted_proxies: int = _env_int("GEOIP_PLS_TRUSTED_PROXIES", 2)

	# GeoIP database paths (geoip2 context source only)
	geoip_city_db: Path = Path(
		os.getenv(
			"GEOIP_PLS_GEOIP_CITY_DB",
			BASE_DIR / "data" / "GeoLite2-City.mmdb",
		)
	)
	geoip_asn_db: Path = Path(
		os.getenv(
			"GEOIP_PLS_GEOIP_ASN_DB",
			BASE_DIR / "data" / "GeoLite2-ASN.mmdb",
		)
	)
	colo: str = os.getenv("GEOIP_PLS_COLO", "LOCAL")

	# Observability endpoints
	metrics_enabled: bool = _env_bool("GEOIP_PLS_METRICS_ENABLED", False)


settings = Settings()
