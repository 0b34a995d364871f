"""
Error types raised inside the categorization pipeline.

Everything I/O related is caught at the component that talks to the outside
world (cache tiers, classifier) and turned into "no result". Only programmer
errors are allowed to escape `CategorizationOrchestrator.resolve`.
"""


class CategorizationError(Exception):
    """Base class for pipeline errors"""


class ConfigurationError(CategorizationError):
    """Missing credentials or a malformed setting"""


class TransportError(CategorizationError):
    """Network failure or non-success response from an external service"""


class CacheTransportError(TransportError):
    """The remote cache tier could not be reached or rejected the query"""


class ClassifierTimeoutError(TransportError):
    """A classifier call ran past its per-batch deadline"""


class ParseError(CategorizationError):
    """Classifier response did not contain a usable JSON object"""
