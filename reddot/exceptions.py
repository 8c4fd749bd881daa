"""Custom exceptions for Reddot."""


class ReddotError(Exception):
    """Base Reddot error."""
    pass


class CaptureUnavailable(ReddotError):
    """No capturable foreground window, or screen capture was denied."""
    pass


class ClassificationDegenerate(ReddotError):
    """Pixel buffer has zero dimensions or an inconsistent stride."""
    pass


class ConfigError(ReddotError):
    """Configuration value out of range."""
    pass


class InterceptionError(ReddotError):
    """The global keyboard hook could not be installed or died."""
    pass
