from dataclasses import dataclass
from typing import Any, Mapping

# WSGI environ key a hosting layer uses to hand over a request.cf style mapping
ENVIRON_KEY = "geoip_pls.cf"

ASN_MAX = 2**32 - 1

# Edge-injected visitor location headers -> GeoContext attribute
HEADER_MAP = {
	"asn": "X-ASN",
	"as_organization": "X-AS-Organization",
	"country": "CF-IPCountry",
	"city": "CF-IPCity",
	"continent": "CF-IPContinent",
	"latitude": "CF-IPLatitude",
	"longitude": "CF-IPLongitude",
	"postal_code": "CF-Postal-Code",
	"metro_code": "CF-Metro-Code",
	"region": "CF-Region",
	"region_code": "CF-Region-Code",
	"timezone": "CF-Timezone",
}

# Cloudflare request.cf keys -> GeoContext attribute
CF_KEY_MAP = {
	"asn": "asn",
	"as_organization": "asOrganization",
	"country": "country",
	"city": "city",
	"continent": "continent",
	"latitude": "latitude",
	"longitude": "longitude",
	"postal_code": "postalCode",
	"metro_code": "metroCode",
	"region": "region",
	"region_code": "regionCode",
	"timezone": "timezone",
}


def _opt_str(value: Any) -> str | None:
	if value is None:
		return None
	value = str(value).strip()
	return value or None


def _opt_int(value: Any) -> int | None:
	if value is None or isinstance(value, bool):
		return None
	try:
		return int(str(value).strip())
	except ValueError:
		return None


def _opt_asn(value: Any) -> int | None:
	"""ASNs are unsigned 32-bit; anything outside that range is treated as absent."""
	asn = _opt_int(value)
	if asn is None or not 0 <= asn <= ASN_MAX:
		return None
	return asn


def _opt_float(value: Any) -> float | None:
	if value is None or isinstance(value, bool):
		return None
	try:
		return float(str(value).strip())
	except ValueError:
		return None


@dataclass(frozen=True)
class GeoContext:
	"""Read-only geolocation facts the platform attached to one request."""

	colo: str
	timezone: str = ""
	asn: int | None = None
	as_organization: str | None = None
	country: str | None = None
	city: str | None = None
	continent: str | None = None
	latitude: float | None = None
	longitude: float | None = None
	postal_code: str | None = None
	metro_code: str | None = None
	region: str | None = None
	region_code: str | None = None

	def coordinates(self) -> tuple[float, float] | None:
		"""Return (latitude, longitude), or None unless both are known."""
		if self.latitude is None or self.longitude is None:
			return None
		return self.latitude, self.longitude

	@classmethod
	def from_values(cls, colo: str, values: Mapping[str, Any]) -> "GeoContext":
		"""Build a context from raw attribute values keyed by attribute name.

		Values that do not parse into the attribute's type are treated as absent.
		"""
		return cls(
			colo=colo,
			timezone=_opt_str(values.get("timezone")) or "",
			asn=_opt_asn(values.get("asn")),
			as_organization=_opt_str(values.get("as_organization")),
			country=_opt_str(values.get("country")),
			city=_opt_str(values.get("city")),
			continent=_opt_str(values.get("continent")),
			latitude=_opt_float(values.get("latitude")),
			longitude=_opt_float(values.get("longitude")),
			postal_code=_opt_str(values.get("postal_code")),
			metro_code=_opt_str(values.get("metro_code")),
			region=_opt_str(values.get("region")),
			region_code=_opt_str(values.get("region_code")),
		)

	@classmethod
	def from_cf(cls, cf: Mapping[str, Any]) -> "GeoContext | None":
		"""Build a context from a Cloudflare request.cf style mapping."""
		colo = _opt_str(cf.get("colo"))
		if colo is None:
			return None
		values = {attr: cf.get(key) for attr, key in CF_KEY_MAP.items()}
		return cls.from_values(colo, values)


class ContextProvider:
	"""Supplies the GeoContext for the current request, or None if there is none."""

	name = "base"

	def get_context(self, request) -> GeoContext | None:
		raise NotImplementedError


class EnvironContextProvider(ContextProvider):
	"""Reads a request.cf style mapping injected into the WSGI environ."""

	name = "environ"

	def __init__(self, key: str = ENVIRON_KEY) -> None:
		self.key = key

	def get_context(self, request) -> GeoContext | None:
		cf = request.environ.get(self.key)
		if not isinstance(cf, Mapping):
			return None
		return GeoContext.from_cf(cf)


def colo_from_ray(ray: str | None) -> str | None:
	"""Extract the colo code from a CF-Ray header (e.g. 8a1b2c3d4e5f6789-SJC)."""
	if not ray:
		return None
	_, sep, colo = ray.strip().rpartition("-")
	if not sep or not colo:
		return None
	return colo.upper()


class HeaderContextProvider(ContextProvider):
	"""Reads visitor location headers added by the edge in front of the app."""

	name = "headers"

	def __init__(self, header_map: Mapping[str, str] | None = None) -> None:
		self.header_map = dict(header_map or HEADER_MAP)

	def get_context(self, request) -> GeoContext | None:
		colo = colo_from_ray(request.headers.get("CF-Ray"))
		if colo is None:
			return None
		values = {
			attr: request.headers.get(header)
			for attr, header in self.header_map.items()
		}
		return GeoContext.from_values(colo, values)


def build_provider(settings) -> ContextProvider:
	"""Create the context provider selected by settings.context_source."""
	source = (settings.context_source or "").strip().lower()
	if source == "headers":
		return HeaderContextProvider()
	if source == "environ":
		return EnvironContextProvider()
	if source == "geoip2":
		# Imported lazily so the headers/environ sources never open databases
		from geoip_pls.geoip_resolver import GeoIP2ContextProvider

		return GeoIP2ContextProvider(
			city_db=settings.geoip_city_db,
			asn_db=settings.geoip_asn_db,
			colo=settings.colo,
		)
	raise ValueError(f"unknown context source: {settings.context_source!r}")
