"""
Request/response models for the notification relay endpoints.
"""

from pydantic import BaseModel, Field


class EmailRequest(BaseModel):
    title: str = Field(..., max_length=200, description="Inserted into the subject line")
    content: str = Field(..., max_length=10000, description="Plain-text body")


class RelayMessage(BaseModel):
    message: str


class AlertResponse(BaseModel):
    call_id: str = Field(..., description="Telephony provider call identifier")
