"""Custom exceptions for cogreduce."""


class CogReduceError(Exception):
    """Base exception for all cogreduce errors."""


class ConfigError(CogReduceError):
    """Configuration-related errors."""


class LoaderError(CogReduceError):
    """Errors reading a method document."""


class ContractError(CogReduceError):
    """A caller broke the contract of a search component.

    Raised for structural misuse such as asking for the metrics of an empty
    sequence or evaluating a sequence against another method's cache.
    """


class GraphError(CogReduceError):
    """Extraction graph errors."""
