"""Token swap quoting backed by a cached market price feed."""

__version__ = "0.1.0"
