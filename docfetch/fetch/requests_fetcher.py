import requests
from loguru import logger
from docfetch.core.config import settings
from docfetch.fetch.sanitizer import sanitize
from docfetch.fetch.utils import is_allowed_source_url

from .base import BaseFetcher, FetchFailure, FetchOutcome, FetchSuccess

class RequestsFetcher(BaseFetcher):
    """Single blocking GET per call; no retries"""

    def __init__(self, timeout_sec: float = None, user_agent: str = None, url_marker: str = None):
        self.timeout_sec = settings.REQUEST_TIMEOUT if timeout_sec is None else timeout_sec
        self.user_agent = user_agent or settings.USER_AGENT
        self.url_marker = settings.ALLOWED_URL_MARKER if url_marker is None else url_marker

    def fetch(self, url: str) -> FetchOutcome:
        if not is_allowed_source_url(url, self.url_marker):
            return FetchFailure.invalid_url()

        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        }
        try:
            resp = requests.get(url, headers=headers, timeout=self.timeout_sec)
        except requests.RequestException as e:
            logger.debug("Transport error for {}: {}", url, e)
            return FetchFailure.transport_error(str(e) or e.__class__.__name__)

        status = int(resp.status_code)
        if status != 200:
            return FetchFailure.bad_status(status)

        body = resp.text
        if not body:
            return FetchFailure.empty_body()

        return FetchSuccess(content=sanitize(body))
