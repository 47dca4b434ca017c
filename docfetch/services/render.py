import html
from docfetch.cache.db import CacheStore

NO_CONTENT = "No content found for this document."
NO_TIMESTAMP = "No timestamp available."

def render_document(store: CacheStore, doc_id: int) -> str:
    """Wrap the cached content of a document with its last update time"""
    content = store.get_content(doc_id)
    fetched_at = store.get_fetched_at(doc_id)
    if content is None:
        content = NO_CONTENT
    if fetched_at is None:
        fetched_at = NO_TIMESTAMP

    return (
        '<div class="gdoc-html-content">'
        f"<p><center><strong>Updated:</strong> {html.escape(fetched_at)}</center></p>"
        f"{content}"
        "</div>"
    )
