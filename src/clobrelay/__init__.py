"""clobrelay - relay simplified trade requests into signed CLOB orders."""

__version__ = "0.1.0"
