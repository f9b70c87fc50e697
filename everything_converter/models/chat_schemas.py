"""
Data models for the Chat and Convert APIs
"""

from typing import Optional, List, Literal, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Chat message model"""
    role: Literal["system", "user", "assistant"] = Field(..., description="Role: 'user', 'assistant', or 'system'")
    content: str = Field(..., description="Message content")


class ChatRequest(BaseModel):
    """Request body for POST /api/chat"""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    messages: Optional[List[ChatMessage]] = Field(default=None, description="Conversation to send upstream")
    model: Optional[str] = Field(default=None, description="Requested model; blank or placeholder means default")
    temperature: Optional[float] = Field(default=None, description="Sampling temperature")
    top_p: Optional[float] = Field(default=None, alias="topP", description="Nucleus sampling")
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens", description="Completion token budget")
    stream: bool = Field(default=False, description="Stream raw content deltas as text/plain")
    from_text: Optional[str] = Field(default=None, alias="from", description="Free-text conversion source")
    to_text: Optional[str] = Field(default=None, alias="to", description="Free-text conversion target")
    skip_validation: bool = Field(default=False, alias="skipValidation", description="Skip the validator pass")


class ConvertRequest(BaseModel):
    """Request body for POST /api/convert"""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    from_text: str = Field(default="", alias="from", description="What to convert")
    to_text: str = Field(default="", alias="to", description="What to convert into")
    model: Optional[str] = Field(default=None, description="Requested model")
    temperature: Optional[float] = Field(default=0.2, description="Sampling temperature")
    top_p: Optional[float] = Field(default=0.1, alias="topP", description="Nucleus sampling")
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens", description="Completion token budget")
    skip_validation: bool = Field(default=False, alias="skipValidation", description="Skip the validator pass")


class UsageInfo(BaseModel):
    """Token usage reported by the upstream completion"""
    model_config = ConfigDict(populate_by_name=True)

    prompt_tokens: int = Field(default=0, alias="promptTokens")
    completion_tokens: int = Field(default=0, alias="completionTokens")
    total_tokens: int = Field(default=0, alias="totalTokens")


class CurrencyInfo(BaseModel):
    """Exchange-rate facts echoed back when a currency quote was used"""
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    rate: float
    amount: float


class ConversionStats(BaseModel):
    """Observability metadata attached to a non-streaming completion"""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    conversion_time_seconds: float = Field(..., alias="conversionTimeSeconds")
    model: str = Field(..., description="Effective model used")
    timestamp: str = Field(..., description="ISO-8601 timestamp")
    usage: Optional[UsageInfo] = None
    estimated_cost_usd: Optional[float] = Field(default=None, alias="estimatedCostUSD")
    # Illustrative only: a linear tokens-to-litres heuristic, not a measurement
    estimated_water_liters: Optional[float] = Field(default=None, alias="estimatedWaterLiters")
    currency_info: Optional[CurrencyInfo] = Field(default=None, alias="currencyInfo")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, leaving out absent optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)
