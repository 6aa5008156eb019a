from typing import Literal, List, Optional, Union

from pydantic import BaseModel

FORM_TYPE_KEY = "_formType"


class IntakeResponse(BaseModel):
    status: Literal["success", "error"]
    message: str


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    message: str


class StoredAttachment(BaseModel):
    ok: Literal[True] = True
    url: str
    object_name: str
    content_type: str
    size: int


class AttachmentFailure(BaseModel):
    ok: Literal[False] = False
    error: str


AttachmentResult = Union[StoredAttachment, AttachmentFailure]


class Sheet(BaseModel):
    id: Optional[int] = None
    spreadsheet_id: int
    name: str
    header: List[str]
    header_bold: bool = False
    frozen_rows: int = 0
