import json
from dataclasses import asdict, dataclass
from operator import attrgetter

from geoip_pls.context import GeoContext
from geoip_pls.errors import SerializationError


@dataclass(frozen=True)
class Coordinates:
	"""Latitude/longitude pair, only built when both are known.

	Edge platforms report these as single-precision floats. They are kept as
	Python floats (double precision) and serialized exactly as supplied;
	narrowing to float32 would print noise such as 37.774898529052734.
	"""

	latitude: float
	longitude: float


def _coordinates(ctx: GeoContext) -> Coordinates | None:
	pair = ctx.coordinates()
	if pair is None:
		return None
	latitude, longitude = pair
	return Coordinates(latitude=latitude, longitude=longitude)


# (JSON key, accessor) in output order. Keys match GeoProperties fields.
FIELDS = (
	("colo", attrgetter("colo")),
	("asn", attrgetter("asn")),
	("as_organization", attrgetter("as_organization")),
	("country", attrgetter("country")),
	("city", attrgetter("city")),
	("continent", attrgetter("continent")),
	("coordinates", _coordinates),
	("postal_code", attrgetter("postal_code")),
	("metro_code", attrgetter("metro_code")),
	("region", attrgetter("region")),
	("region_code", attrgetter("region_code")),
	("timezone", attrgetter("timezone")),
)


@dataclass(frozen=True)
class GeoProperties:
	"""Geolocation and network metadata returned by /v1.json.

	Every field is always serialized; absent optional values become null.
	"""

	colo: str
	asn: int | None
	as_organization: str | None
	country: str | None
	city: str | None
	continent: str | None
	coordinates: Coordinates | None
	postal_code: str | None
	metro_code: str | None
	region: str | None
	region_code: str | None
	timezone: str

	@classmethod
	def from_context(cls, ctx: GeoContext) -> "GeoProperties":
		return cls(**{key: accessor(ctx) for key, accessor in FIELDS})

	def to_dict(self) -> dict:
		return asdict(self)


def render_json(props: GeoProperties, pretty: bool = False) -> str:
	"""Serialize GeoProperties, indented when pretty, otherwise compact."""
	try:
		if pretty:
			return json.dumps(props.to_dict(), indent=2, allow_nan=False)
		return json.dumps(props.to_dict(), separators=(",", ":"), allow_nan=False)
	except ValueError as e:
		raise SerializationError(str(e)) from e
