import dataclasses
import json

import pytest

from geoip_pls.context import GeoContext
from geoip_pls.errors import SerializationError
from geoip_pls.properties import FIELDS, Coordinates, GeoProperties, render_json

from tests.conftest import SAN_FRANCISCO

EXPECTED_KEYS = [
	"colo",
	"asn",
	"as_organization",
	"country",
	"city",
	"continent",
	"coordinates",
	"postal_code",
	"metro_code",
	"region",
	"region_code",
	"timezone",
]


def test_field_table_matches_dataclass_fields():
	assert [key for key, _ in FIELDS] == [f.name for f in dataclasses.fields(GeoProperties)]
	assert [key for key, _ in FIELDS] == EXPECTED_KEYS


def test_from_context_copies_every_field():
	props = GeoProperties.from_context(SAN_FRANCISCO)

	assert props.colo == "SJC"
	assert props.asn == 13335
	assert props.as_organization == "Cloudflare, Inc."
	assert props.city == "San Francisco"
	assert props.coordinates == Coordinates(latitude=37.7749, longitude=-122.4194)
	assert props.metro_code == "807"
	assert props.timezone == "America/Los_Angeles"


def test_to_dict_keeps_absent_fields_as_none():
	props = GeoProperties.from_context(GeoContext(colo="AMS", timezone="Europe/Amsterdam"))
	data = props.to_dict()

	assert list(data) == EXPECTED_KEYS
	assert data["colo"] == "AMS"
	assert data["timezone"] == "Europe/Amsterdam"
	for key in EXPECTED_KEYS[1:-1]:
		assert data[key] is None


@pytest.mark.parametrize(
	"latitude, longitude",
	[(51.5, None), (None, -0.12), (None, None)],
)
def test_half_coordinates_are_dropped(latitude, longitude):
	ctx = GeoContext(colo="LHR", latitude=latitude, longitude=longitude)
	assert GeoProperties.from_context(ctx).coordinates is None


def test_coordinates_serialize_as_nested_object():
	data = GeoProperties.from_context(SAN_FRANCISCO).to_dict()
	assert data["coordinates"] == {"latitude": 37.7749, "longitude": -122.4194}


def test_render_compact_has_no_whitespace():
	body = render_json(GeoProperties.from_context(SAN_FRANCISCO))

	assert "\n" not in body
	assert ": " not in body
	assert body.startswith('{"colo":"SJC","asn":13335,')
	assert json.loads(body)["region_code"] == "CA"


def test_render_pretty_is_indented():
	body = render_json(GeoProperties.from_context(SAN_FRANCISCO), pretty=True)

	assert body.startswith('{\n  "colo": "SJC",\n  "asn": 13335,')
	assert '\n  "coordinates": {\n    "latitude": 37.7749,' in body
	assert json.loads(body) == GeoProperties.from_context(SAN_FRANCISCO).to_dict()


def test_render_null_fields():
	body = render_json(GeoProperties.from_context(GeoContext(colo="AMS")))
	assert '"city":null' in body
	assert '"coordinates":null' in body
	assert body.endswith('"timezone":""}')


def test_render_rejects_non_finite_coordinates():
	ctx = GeoContext(colo="SJC", latitude=float("nan"), longitude=1.0)
	with pytest.raises(SerializationError):
		render_json(GeoProperties.from_context(ctx))
