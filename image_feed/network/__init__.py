"""Network layer for Image Feed."""

from .transport import HttpRequest, HttpResponse, RequestsTransport, Transport

__all__ = ["HttpRequest", "HttpResponse", "RequestsTransport", "Transport"]
