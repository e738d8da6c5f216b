"""
Expected-duration backends.

Available backends:
    CPUNPSFBackend: nonparametric step function method
    CPUGAMBackend: rank regression method
"""

from pyduration.expdur.backends.cpu import CPUGAMBackend, CPUNPSFBackend

__all__ = [
    "CPUNPSFBackend",
    "CPUGAMBackend",
]
