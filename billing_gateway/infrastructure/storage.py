"""Document and avatar storage collaborators"""

import base64
from abc import ABC, abstractmethod
from urllib.parse import quote

from billing_gateway.config import settings


class DocumentStorage(ABC):
    """Stores raw file bytes and hands back a retrievable URL"""

    @abstractmethod
    def store(self, client_id: str, name: str, content: bytes, content_type: str) -> str:
        ...


class SimulatedDocumentStorage(DocumentStorage):
    """Keeps no bytes; returns the URL the file would be served from"""

    def __init__(self, url_prefix: str | None = None):
        self.url_prefix = (url_prefix or settings.document_url_prefix).rstrip("/")

    def store(self, client_id: str, name: str, content: bytes, content_type: str) -> str:
        return f"{self.url_prefix}/{client_id}/{name}"


def initials(name: str) -> str:
    """First letters of the first two words, upper-cased"""
    return "".join(part[0] for part in name.split()[:2]).upper()


def placeholder_avatar_url(name: str, base: str | None = None) -> str:
    base = base or settings.avatar_placeholder_base
    return f"{base}?text={quote(initials(name))}"


def to_data_uri(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"
