"""
Pydantic models for the chat endpoints.

ChatRequest validates the incoming body at the boundary, so an empty or
missing message never reaches the classifier. History turns are kept loose
(either field may be blank); blank turns are dropped when the conversation is
assembled, matching what the browser client sends after a cleared input.
"""
from pydantic import BaseModel, Field


class HistoryTurn(BaseModel):
    role: str = ""
    content: str = ""


class ChatRequest(BaseModel):
    message: str = Field(
        ...,
        min_length=1,
        description="Free-text question from the maintenance operator",
    )
    flightId: str | None = Field(default=None, description="Flight currently selected in the UI")
    history: list[HistoryTurn] = []
    promptId: str | None = Field(default=None, description="Name of the system prompt template")


class ChatResponse(BaseModel):
    reply: str


class ClassificationResult(BaseModel):
    intent: str
    # Heuristic score normalised into [0, 1]; not a calibrated probability.
    confidence: float = Field(ge=0.0, le=1.0)
    flightIdMention: bool = False
