"""fincore ML service: transaction classification."""

__version__ = "0.1.0"
