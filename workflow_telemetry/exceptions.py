"""
Exception classes for workflow_telemetry.
"""


class TelemetryError(Exception):
    """Base exception for all telemetry-related errors."""

    pass


class ConfigurationError(TelemetryError):
    """Raised when the reporting configuration cannot be built."""

    def __init__(self, message: str, variable: str = ""):
        self.variable = variable
        if variable:
            super().__init__(f"Invalid configuration for {variable}: {message}")
        else:
            super().__init__(message)


class PushGatewayError(TelemetryError):
    """Raised when the push gateway answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(
            f"Failed to report metrics to Prometheus Push Gateway {url}: "
            f"{status_code} - {reason}"
        )
