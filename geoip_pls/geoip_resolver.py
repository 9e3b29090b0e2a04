import ipaddress
import logging
from pathlib import Path

import geoip2.database
import geoip2.errors

from geoip_pls.context import ContextProvider, GeoContext

logger = logging.getLogger(__name__)


def _lookup_connection(asn_reader, ip: str) -> tuple[int | None, str | None]:
	"""Resolve the autonomous system number and organization for an IP."""
	if asn_reader is None:
		return None, None
	try:
		asn = asn_reader.asn(ip)
	except geoip2.errors.AddressNotFoundError:
		return None, None
	except Exception as e:
		logger.warning("ASN lookup error for IP %s: %s", ip, e)
		return None, None
	return asn.autonomous_system_number, asn.autonomous_system_organization


def lookup_context(city_reader, asn_reader, ip: str, colo: str) -> GeoContext | None:
	"""Resolve an IP using GeoLite2 (City + optional ASN) into a GeoContext."""
	try:
		ipaddress.ip_address(ip)
	except ValueError:
		logger.warning("Invalid client IP address: %s", ip)
		return None

	try:
		city = city_reader.city(ip)
	except geoip2.errors.AddressNotFoundError:
		logger.info("City not found for IP: %s", ip)
		return None

	region = city.subdivisions.most_specific
	metro_code = city.location.metro_code
	asn, as_organization = _lookup_connection(asn_reader, ip)

	return GeoContext(
		colo=colo,
		timezone=city.location.time_zone or "",
		asn=asn,
		as_organization=as_organization,
		country=city.country.iso_code,
		city=city.city.names.get("en"),
		continent=city.continent.code,
		latitude=city.location.latitude,
		longitude=city.location.longitude,
		postal_code=city.postal.code,
		metro_code=str(metro_code) if metro_code is not None else None,
		region=region.names.get("en") if region.names else None,
		region_code=region.iso_code,
	)


class GeoIP2ContextProvider(ContextProvider):
	"""Builds the request context from local MaxMind databases.

	For deployments without an edge platform: the client address is taken from
	request.remote_addr, which ProxyFix has already resolved from X-Forwarded-For.
	The ASN database is optional; without it asn and as_organization stay null.
	"""

	name = "geoip2"

	def __init__(self, city_db: Path, asn_db: Path | None = None, colo: str = "LOCAL") -> None:
		self.colo = colo
		self.city_reader = geoip2.database.Reader(str(city_db))
		self.asn_reader = None
		if asn_db is not None and Path(asn_db).exists():
			self.asn_reader = geoip2.database.Reader(str(asn_db))
		else:
			logger.warning("ASN database not found: %s", asn_db)
		logger.info("Loaded GeoIP databases city=%s asn=%s", city_db, self.asn_reader is not None)

	def get_context(self, request) -> GeoContext | None:
		ip = request.remote_addr
		if not ip:
			return None
		return lookup_context(self.city_reader, self.asn_reader, ip, self.colo)

	def close(self) -> None:
		self.city_reader.close()
		if self.asn_reader is not None:
			self.asn_reader.close()
