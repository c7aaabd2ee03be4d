from pydantic import BaseModel, ConfigDict
from datetime import date
from typing import Optional


class CertificateRead(BaseModel):
    id: int
    enrollment_id: int
    certificate_number: str
    issue_date: date
    file_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CertificateIssueResponse(BaseModel):
    certificate: CertificateRead
    already_issued: bool
    message: str
