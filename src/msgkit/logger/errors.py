"""Exception taxonomy for the logger and the tooling built on it."""


class MsgkitError(Exception):
    """Base class for all msgkit errors."""


class ConfigurationError(MsgkitError, ValueError):
    """Invalid setup: unknown format, invalid threshold, reserved level rank."""


class RenderError(MsgkitError):
    """A record could not be expanded through its format."""


class LoggerPanic(MsgkitError, RuntimeError):
    """Raised by Logger.panic() after the message has been logged."""


class TemplateFunctionError(MsgkitError):
    """A template helper was called with unusable arguments."""
