"""Dirdeck: a terminal client for browsing a remote JSON/HTTP file store."""

from importlib import metadata as _metadata

DISTRIBUTION_NAME = "dirdeck"

__all__ = ["DISTRIBUTION_NAME", "__version__"]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version(DISTRIBUTION_NAME)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + ["__version__"])
