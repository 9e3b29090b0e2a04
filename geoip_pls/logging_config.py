import logging
import sys

from geoip_pls.config import settings


def setup_logging() -> None:
	"""Configure root logger for the application."""
	level_name = getattr(settings, "log_level", "INFO")
	level = getattr(logging, level_name.upper(), logging.INFO)

	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
		stream=sys.stdout,
	)

	# maxminddb is chatty at DEBUG when opening databases
	logging.getLogger("maxminddb").setLevel(logging.WARNING)
	logging.getLogger("werkzeug").setLevel(logging.WARNING)
