class GeoipPlsError(Exception):
	"""Base class for errors surfaced as failed responses."""

	code = "internal_error"
	status_code = 500


class ContextUnavailable(GeoipPlsError):
	"""The hosting platform did not supply geolocation context for the request."""

	code = "context_unavailable"


class SerializationError(GeoipPlsError):
	"""GeoProperties could not be rendered as JSON (e.g. NaN coordinates)."""

	code = "serialization_failed"
