from typing import Dict, Any


def _sanitize_label_value(value: str) -> str:
	"""Escape characters inside Prometheus label values."""
	return (
		value.replace("\\", "\\\\")
		.replace("\n", "\\n")
		.replace('"', '\\"')
	)


def _header(lines: list[str], name: str, kind: str, help_text: str) -> None:
	lines.append(f"# HELP {name} {help_text}")
	lines.append(f"# TYPE {name} {kind}")


def _labelled(lines: list[str], name: str, label: str, counts: Dict[Any, int]) -> None:
	for value, count in counts.items():
		lines.append(f'{name}{{{label}="{_sanitize_label_value(str(value))}"}} {count}')


def format_prometheus_metrics(snapshot: Dict[str, Any]) -> str:
	"""Convert a Metrics snapshot into Prometheus exposition format."""
	lines: list[str] = []
	source = _sanitize_label_value(str(snapshot.get("context_source", "")))

	_header(lines, "geoip_pls_info", "gauge", "Service information; the context_source label names the context provider.")
	lines.append(f'geoip_pls_info{{context_source="{source}"}} 1')

	_header(lines, "geoip_pls_uptime_seconds", "gauge", "Seconds since the app was created.")
	lines.append(f"geoip_pls_uptime_seconds {snapshot.get('uptime_seconds', 0.0) or 0.0:.3f}")

	_header(lines, "geoip_pls_requests_total", "counter", "HTTP requests handled, by matched route rule.")
	_labelled(lines, "geoip_pls_requests_total", "route", snapshot.get("by_route", {}) or {})

	_header(lines, "geoip_pls_responses_total", "counter", "HTTP responses, by status code.")
	_labelled(lines, "geoip_pls_responses_total", "status", snapshot.get("by_status_code", {}) or {})

	_header(lines, "geoip_pls_failures_total", "counter", "Failed /v1.json requests, by error code.")
	_labelled(lines, "geoip_pls_failures_total", "error", snapshot.get("failures", {}) or {})

	_header(lines, "geoip_pls_pretty_responses_total", "counter", "Responses rendered in pretty mode.")
	lines.append(f"geoip_pls_pretty_responses_total {snapshot.get('pretty_responses', 0) or 0}")

	_header(lines, "geoip_pls_request_latency_ms_average", "gauge", "Average request latency in milliseconds.")
	lines.append(f"geoip_pls_request_latency_ms_average {snapshot.get('average_latency_ms', 0.0) or 0.0}")

	_header(lines, "geoip_pls_request_latency_ms_max", "gauge", "Slowest request latency in milliseconds.")
	lines.append(f"geoip_pls_request_latency_ms_max {snapshot.get('max_latency_ms', 0.0) or 0.0}")

	return "\n".join(lines) + "\n"
