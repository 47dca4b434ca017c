from typing import Dict
from loguru import logger
from docfetch.cache.db import CacheStore

class DocumentRegistry:
    """Add, remove and list the id -> source URL mappings"""

    def __init__(self, store: CacheStore):
        self.store = store

    def add_or_update(self, doc_id: int, url: str) -> None:
        _check_id(doc_id)
        if not url or not url.strip():
            raise ValueError("URL is required")

        with self.store.lock:
            urls = self.store.get_urls()
            action = "Updated" if doc_id in urls else "Registered"
            urls[doc_id] = url.strip()
            self.store.set_urls(urls)
        logger.info("{} document #{} -> {}", action, doc_id, url.strip())

    def remove(self, doc_id: int) -> bool:
        """Drop the mapping with its cached content; False if the id was unknown"""
        _check_id(doc_id)
        with self.store.lock:
            known = doc_id in self.store.get_urls()
            self.store.delete_entry(doc_id)
        if known:
            logger.info("Removed document #{}", doc_id)
        return known

    def list_all(self) -> Dict[int, str]:
        return dict(sorted(self.store.get_urls().items()))

def _check_id(doc_id: int):
    if isinstance(doc_id, bool) or not isinstance(doc_id, int) or doc_id < 1:
        raise ValueError(f"Document id must be a positive integer, got {doc_id!r}")
