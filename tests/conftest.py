import pytest

from geoip_pls.app import create_app
from geoip_pls.config import Settings
from geoip_pls.context import ContextProvider, GeoContext


SAN_FRANCISCO = GeoContext(
	colo="SJC",
	timezone="America/Los_Angeles",
	asn=13335,
	as_organization="Cloudflare, Inc.",
	country="US",
	city="San Francisco",
	continent="NA",
	latitude=37.7749,
	longitude=-122.4194,
	postal_code="94107",
	metro_code="807",
	region="California",
	region_code="CA",
)


class StaticContextProvider(ContextProvider):
	"""Hands out the same context (or None) for every request."""

	name = "static"

	def __init__(self, ctx):
		self.ctx = ctx
		self.calls = 0

	def get_context(self, request):
		self.calls += 1
		return self.ctx


@pytest.fixture
def test_settings():
	return Settings(trusted_proxies=0, metrics_enabled=False)


@pytest.fixture
def provider():
	return StaticContextProvider(SAN_FRANCISCO)


@pytest.fixture
def app(test_settings, provider):
	app = create_app(settings=test_settings, provider=provider)
	app.config["TESTING"] = True
	return app


@pytest.fixture
def client(app):
	return app.test_client()
