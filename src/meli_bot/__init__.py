"""Mercado Livre delivery bot - OAuth credential lifecycle and order webhook pipeline."""

__version__ = "1.0.0"
