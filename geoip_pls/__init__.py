"""geoip.pls - echo the edge platform's geolocation context as JSON."""

__version__ = "1.0.0"
