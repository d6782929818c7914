"""Notification template schemas."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List


class TemplateTestRequest(BaseModel):
    """Template to preview and optional context values."""

    template: str = Field(min_length=1, description="Message with {variable} placeholders")
    context: Dict[str, Any] = Field(default_factory=dict, description="Values for placeholders")


class TemplatePreview(BaseModel):
    original_template: str
    processed_message: str
    variables: List[str]
    context: Dict[str, Any]


class TemplateTestResponse(BaseModel):
    success: bool = True
    data: TemplatePreview


class TemplateVariablesResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
