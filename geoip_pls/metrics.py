import threading
from collections import Counter
from time import time

# Route label for requests that matched no URL rule
UNMATCHED_ROUTE = "unmatched"


class Metrics:
	"""Request counters for geoip.pls.

	Requests are labelled by the matched route rule (e.g. "/<path:path>"),
	never by the raw path, so the number of label values is fixed by the
	routing table. Failures are counted by error code.
	"""

	def __init__(self, context_source: str) -> None:
		self._lock = threading.Lock()
		self.context_source = context_source
		self.started_at = time()
		self.route_counters: Counter = Counter()
		self.status_counters: Counter = Counter()
		self.failure_counters: Counter = Counter()
		self.pretty_responses = 0
		self.latency_ms_total = 0.0
		self.latency_ms_max = 0.0

	def record_request(self, route: str | None, status_code: int, duration_ms: float, pretty: bool = False) -> None:
		with self._lock:
			self.route_counters[route or UNMATCHED_ROUTE] += 1
			self.status_counters[status_code] += 1
			self.latency_ms_total += duration_ms
			self.latency_ms_max = max(self.latency_ms_max, duration_ms)
			if pretty:
				self.pretty_responses += 1

	def record_failure(self, code: str) -> None:
		"""Count a ContextUnavailable / SerializationError style failure."""
		with self._lock:
			self.failure_counters[code] += 1

	def snapshot(self) -> dict:
		with self._lock:
			total = sum(self.route_counters.values())
			return {
				"context_source": self.context_source,
				"uptime_seconds": time() - self.started_at,
				"total_requests": total,
				"pretty_responses": self.pretty_responses,
				"average_latency_ms": self.latency_ms_total / total if total else 0.0,
				"max_latency_ms": self.latency_ms_max,
				"by_route": dict(self.route_counters),
				"by_status_code": dict(self.status_counters),
				"failures": dict(self.failure_counters),
			}
