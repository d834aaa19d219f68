"""chordfinder: key-aware chord spelling and harmonic function analysis."""

__version__ = "0.1.0"
