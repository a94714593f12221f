"""Adaptador de acesso às CDNs de origem."""

from app.infra.origin.fetcher import OriginFetcher, fix_redirect_location

__all__ = ["OriginFetcher", "fix_redirect_location"]
