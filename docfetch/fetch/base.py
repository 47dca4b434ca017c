from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

class FailureReason(str, Enum):
    INVALID_URL = "invalid_url"
    TRANSPORT_ERROR = "transport_error"
    BAD_STATUS = "bad_status"
    EMPTY_BODY = "empty_body"

@dataclass(frozen=True)
class FetchSuccess:
    content: str  # sanitized HTML

    @property
    def ok(self) -> bool:
        return True

@dataclass(frozen=True)
class FetchFailure:
    reason: FailureReason
    message: str
    status_code: Optional[int] = None  # set for BAD_STATUS only

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def invalid_url(cls) -> "FetchFailure":
        return cls(
            FailureReason.INVALID_URL,
            "Invalid URL: The URL is either not valid or not a Google Doc URL.",
        )

    @classmethod
    def transport_error(cls, detail: str) -> "FetchFailure":
        return cls(FailureReason.TRANSPORT_ERROR, f"Fetch failed: {detail}")

    @classmethod
    def bad_status(cls, status_code: int) -> "FetchFailure":
        return cls(
            FailureReason.BAD_STATUS,
            f"Fetch failed: Received HTTP {status_code} response from the server.",
            status_code=status_code,
        )

    @classmethod
    def empty_body(cls) -> "FetchFailure":
        return cls(
            FailureReason.EMPTY_BODY,
            "No content fetched: The document may be empty or inaccessible.",
        )

FetchOutcome = Union[FetchSuccess, FetchFailure]

class BaseFetcher:
    def fetch(self, url: str) -> FetchOutcome:
        raise NotImplementedError
