"""Document store adapters."""

from src.providers.document_store.notion_provider import NotionDocumentStore

__all__ = ["NotionDocumentStore"]
