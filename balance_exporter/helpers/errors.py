"""Exception hierarchy shared by the clients, the scheduler and the service."""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class UpstreamUnavailableError(ExporterError):
    """An upstream service could not be reached, timed out or returned an error status."""


class UpstreamMalformedError(ExporterError):
    """An upstream service answered with a payload of unexpected shape."""


class NotFoundError(ExporterError):
    """The requested validator, slot or resource does not exist upstream."""


class ConfigInvalidError(ExporterError, ValueError):
    """A setting or cron expression is missing or invalid."""


class SchedulerStateError(ExporterError, RuntimeError):
    """A scheduler lifecycle method was called from the wrong state."""


__all__ = [
    "ConfigInvalidError",
    "ExporterError",
    "NotFoundError",
    "SchedulerStateError",
    "UpstreamMalformedError",
    "UpstreamUnavailableError",
]
