"""Mercado Livre API endpoint paths."""

# Authorization host (auth.mercadolivre.com.br)
AUTHORIZATION = "/authorization"

# API host (api.mercadolibre.com)
OAUTH_TOKEN = "/oauth/token"
PACK_MESSAGES = "/messages/packs/{pack_id}/sellers/{seller_id}"
