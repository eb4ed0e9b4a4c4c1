"""Mercado Livre API module."""

from .client import MeliAPIClient
from .endpoints import AUTHORIZATION, OAUTH_TOKEN, PACK_MESSAGES

__all__ = ["MeliAPIClient", "AUTHORIZATION", "OAUTH_TOKEN", "PACK_MESSAGES"]
