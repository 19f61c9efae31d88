"""COD e-commerce profit and cash-flow calculator."""

__version__ = "1.0.0"
