from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ExtractRequest(_CamelModel):
    # Optional so a missing field maps to 400 instead of FastAPI's 422.
    base64_data: Optional[str] = Field(default=None, alias="base64Data")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class ExtractResponse(BaseModel):
    text: str


class AnalyzeRequest(_CamelModel):
    feature_text: Optional[str] = Field(default=None, alias="featureText")
    title: Optional[str] = ""
    context: Optional[str] = ""
    clarification_notes: Optional[str] = Field(default=None, alias="clarificationNotes")


class ErrorResponse(_CamelModel):
    error: str
    raw_response: Optional[str] = Field(default=None, alias="rawResponse")
