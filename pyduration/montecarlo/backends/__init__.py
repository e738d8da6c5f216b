"""Bootstrap backends."""

from pyduration.montecarlo.backends.cpu import CPUBootstrapBackend

__all__ = ["CPUBootstrapBackend"]
