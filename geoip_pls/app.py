import logging
import time

from flask import Flask, Response, g, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix

from geoip_pls.config import settings as default_settings
from geoip_pls.context import ContextProvider, build_provider
from geoip_pls.errors import ContextUnavailable, GeoipPlsError
from geoip_pls.logging_config import setup_logging
from geoip_pls.metrics import Metrics
from geoip_pls.prometheus_exporter import format_prometheus_metrics
from geoip_pls.properties import GeoProperties, render_json

logger = logging.getLogger(__name__)

FALLBACK_BODY = "geoip.pls - try /v1.json"


def _route_any_method(app: Flask, rule: str, endpoint: str, view_func, **options) -> None:
	"""Register a rule that matches on path alone, whatever the HTTP method.

	Flask's add_url_rule always pins a method list; a werkzeug Rule with
	methods=None accepts every method, including TRACE or WebDAV verbs.
	"""
	app.url_map.add(app.url_rule_class(rule, endpoint=endpoint, methods=None, **options))
	app.view_functions[endpoint] = view_func


def create_app(settings=None, provider: ContextProvider | None = None) -> Flask:
	"""Build the WSGI app.

	The context provider is the only source of geolocation data. Tests and
	hosting layers pass their own; otherwise settings.context_source picks one.
	"""
	settings = settings or default_settings
	if provider is None:
		provider = build_provider(settings)

	# No static route: every path besides /v1.json belongs to the fallback
	app = Flask(__name__, static_folder=None)
	if settings.trusted_proxies > 0:
		app.wsgi_app = ProxyFix(app.wsgi_app, x_for=settings.trusted_proxies)

	# Nothing is recorded unless metrics are switched on
	metrics = Metrics(context_source=provider.name) if settings.metrics_enabled else None
	app.extensions["geoip_pls.provider"] = provider
	app.extensions["geoip_pls.metrics"] = metrics

	@app.before_request
	def before_request():
		"""Store request start time for latency measurement."""
		g.request_start_time = time.perf_counter()

	@app.after_request
	def after_request(response):
		"""Log request details and record metrics after each response."""
		start = getattr(g, "request_start_time", None)
		duration_ms = 0.0
		if start is not None:
			duration_ms = (time.perf_counter() - start) * 1000.0

		if metrics is not None:
			rule = request.url_rule.rule if request.url_rule is not None else None
			metrics.record_request(
				route=rule,
				status_code=response.status_code,
				duration_ms=duration_ms,
				pretty=g.get("pretty", False),
			)
		logger.info(
			"request_completed method=%s path=%s status=%s duration_ms=%.2f client_ip=%s",
			request.method,
			request.path,
			response.status_code,
			duration_ms,
			request.remote_addr,
		)
		return response

	@app.errorhandler(GeoipPlsError)
	def handle_geoip_pls_error(e):
		logger.error("request_failed path=%s error=%s details=%s", request.path, e.code, e)
		if metrics is not None:
			metrics.record_failure(e.code)
		return jsonify({"error": e.code}), e.status_code

	def v1_json():
		"""Geolocation context of the current request as JSON.

		Query params:
			pretty -> indented output (presence only, value ignored)
		"""
		ctx = provider.get_context(request)
		if ctx is None:
			raise ContextUnavailable("no geolocation context for request")

		props = GeoProperties.from_context(ctx)
		pretty = "pretty" in request.args
		body = render_json(props, pretty=pretty)
		g.pretty = pretty
		return Response(body, status=200, mimetype="application/json")

	_route_any_method(app, "/v1.json", "v1_json", v1_json)

	if settings.metrics_enabled:

		@app.route("/health")
		def health():
			"""Simple health check endpoint."""
			return jsonify({"status": "ok", "context_source": provider.name}), 200

		@app.route("/metrics")
		def metrics_endpoint():
			"""Expose request metrics, Prometheus text unless ?format=json."""
			snap = metrics.snapshot()
			if request.args.get("format", "").lower() == "json":
				return jsonify(snap), 200
			return Response(format_prometheus_metrics(snap), content_type="text/plain; version=0.0.4; charset=utf-8")

	def fallback(path):
		return Response(FALLBACK_BODY, status=200, mimetype="text/plain")

	_route_any_method(app, "/", "fallback", fallback, defaults={"path": ""})
	_route_any_method(app, "/<path:path>", "fallback", fallback)

	return app


def main() -> None:
	setup_logging()
	app = create_app()
	logger.info("Listening on %s:%s (context source: %s)", default_settings.host, default_settings.port, default_settings.context_source)
	app.run(
		host=default_settings.host,
		port=default_settings.port,
		debug=default_settings.flask_debug,
	)


if __name__ == "__main__":
	main()
