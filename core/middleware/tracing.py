"""
Tracing middleware for OpenTelemetry.

Adds a server span to every request.
"""

import json
import time
from typing import Callable

from django.http import HttpRequest, HttpResponse

from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)

SENSITIVE_FIELDS = ("password", "secret", "token", "key", "admin")


class TracingMiddleware:
    """
    Middleware to add distributed tracing to requests.

    Creates a span for each request and stores its trace id on the
    request for error responses.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def _sanitize_dict(self, data, max_depth=3):
        """Sanitize dictionary by removing sensitive fields."""
        if max_depth <= 0:
            return "..."
        if isinstance(data, dict):
            sanitized = {}
            for key, value in data.items():
                if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
                    sanitized[key] = "***REDACTED***"
                elif isinstance(value, (dict, list)):
                    sanitized[key] = self._sanitize_dict(value, max_depth - 1)
                else:
                    sanitized[key] = str(value)[:500]
            return sanitized
        if isinstance(data, list):
            return [self._sanitize_dict(item, max_depth - 1) for item in data[:10]]
        return str(data)[:500]

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Process request with tracing."""
        span_name = f"{request.method} {request.path}"
        with tracer.start_as_current_span(span_name) as span:
            self._set_request_attributes(span, request)
            self._process_request_body(span, request)

            request.trace_id = format(span.get_span_context().trace_id, "032x")  # type: ignore

            start_time = time.time()
            try:
                response = self.get_response(request)
            except Exception as e:
                self._handle_exception(span, e, time.time() - start_time)
                raise
            self._set_response_attributes(span, response, time.time() - start_time)
            return response

    def _set_request_attributes(self, span, request: HttpRequest):
        """Set attributes from the request."""
        span.set_attribute("http.method", request.method)
        span.set_attribute("http.route", request.path)
        span.set_attribute("http.user_agent", request.META.get("HTTP_USER_AGENT", ""))
        span.set_attribute("http.remote_addr", request.META.get("REMOTE_ADDR", ""))
        span.set_attribute("http.scheme", request.scheme)
        if "X-Admin-Key" in request.headers:
            span.set_attribute("http.request.has_admin_key", True)

        for key, value in list(request.GET.items())[:10]:
            if not any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
                span.set_attribute(f"http.request.query.{key}", str(value))

    def _process_request_body(self, span, request: HttpRequest):
        """Record the sanitized JSON request body."""
        if request.content_type != "application/json" or not request.body:
            return
        body_str = request.body.decode("utf-8", errors="ignore")
        span.set_attribute("http.request.body_size", len(body_str))
        try:
            body_json = json.loads(body_str[:10000])
        except ValueError:
            return
        span.set_attribute(
            "http.request.body", json.dumps(self._sanitize_dict(body_json))[:5000]
        )

    def _set_response_attributes(self, span, response, duration: float):
        """Set attributes from the response."""
        span.set_attribute("http.status_code", response.status_code)
        span.set_attribute("http.duration_ms", round(duration * 1000, 2))
        if response.status_code >= 400:
            self._extract_error_details(span, response)
            span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
        else:
            span.set_status(Status(StatusCode.OK))

    def _extract_error_details(self, span, response):
        """Extract error details from response JSON."""
        if "json" not in response.get("Content-Type", ""):
            return
        try:
            body_json = json.loads(response.content.decode("utf-8", errors="ignore"))
        except ValueError:
            return
        if not isinstance(body_json, dict):
            return
        error_info = body_json.get("error")
        if isinstance(error_info, dict):
            for key in ["code", "message"]:
                if key in error_info:
                    span.set_attribute(f"error.{key}", str(error_info[key]))
        elif "code" in body_json:
            span.set_attribute("error.code", str(body_json["code"]))

    def _handle_exception(self, span, e: Exception, duration: float):
        """Handle exception and update span."""
        span.set_attribute("http.duration_ms", round(duration * 1000, 2))
        span.set_attribute("error", True)
        span.set_attribute("error.type", type(e).__name__)
        span.record_exception(e)
        span.set_status(Status(StatusCode.ERROR, f"{type(e).__name__}: {e}"))
