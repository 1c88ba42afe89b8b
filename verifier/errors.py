"""Exception types raised by the verifier."""


class VerifierError(Exception):
    """Base class for every failure the verifier raises on purpose."""


class ConfigError(VerifierError):
    """Configuration is incomplete or names something unknown."""


class DataShapeError(VerifierError):
    """A design node or rendered element does not have the expected shape."""


class DesignSourceError(VerifierError):
    """The design-file API could not be reached or returned an error."""


class ReportBuildError(VerifierError):
    """The structured report could not be serialised."""
