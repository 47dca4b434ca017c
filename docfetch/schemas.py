from pydantic import BaseModel, Field
from typing import Dict, List, Optional

class DocumentRegistration(BaseModel):
    id: int = Field(ge=1, description="Document number used in /documents/{id}")
    url: str = Field(min_length=1, description="HTML export URL of the document")

class DocumentList(BaseModel):
    documents: Dict[int, str]

class FailureDetail(BaseModel):
    id: int
    reason: str
    status_code: Optional[int] = None
    message: str

class RefreshResponse(BaseModel):
    success_count: int
    failure_count: int
    outcome: str
    failures: List[FailureDetail] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)
    next_run_at: Optional[str] = Field(None, description="Next automatic pass, ISO 8601 UTC")

class ScheduleStatus(BaseModel):
    running: bool
    period_seconds: float
    next_run_at: Optional[str] = None
