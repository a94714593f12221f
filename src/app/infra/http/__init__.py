"""Cliente HTTP compartilhado pelos adaptadores de app/infra."""

from app.infra.http.client import HttpClient, HttpClientConfig, HttpError

__all__ = ["HttpClient", "HttpClientConfig", "HttpError"]
