"""relflow: release automation for libraries published to several registries."""

__version__ = "0.3.0"
