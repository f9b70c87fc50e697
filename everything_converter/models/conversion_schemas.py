"""
Data models for the suggestion, surprise and benchmark APIs
"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class SuggestionRequest(BaseModel):
    """Request for conversion target suggestions"""
    model_config = ConfigDict(populate_by_name=True)

    from_text: Optional[str] = Field(default=None, alias="fromText", description="What the user converts from")


class SuggestionResponse(BaseModel):
    """Exactly three suggested conversion targets"""
    suggestions: List[str] = Field(..., min_length=3, max_length=3)


class SurpriseRequest(BaseModel):
    """Request for randomly generated conversion pairs"""
    model_config = ConfigDict(protected_namespaces=())

    model: Optional[str] = Field(default=None, description="Requested model")
    count: int = Field(default=2, ge=1, le=5, description="Number of pairs to generate")


class ConversionPair(BaseModel):
    """A from/to pair proposed by the model"""
    model_config = ConfigDict(populate_by_name=True)

    from_text: str = Field(..., alias="from")
    to_text: str = Field(..., alias="to")


class SurpriseResponse(BaseModel):
    pairs: List[ConversionPair]


class BenchmarkRequest(BaseModel):
    """Run one conversion against several models"""
    model_config = ConfigDict(populate_by_name=True)

    from_text: str = Field(default="", alias="from")
    to_text: str = Field(default="", alias="to")
    models: List[str] = Field(default_factory=list, description="Model identifiers to compare")


class BenchmarkResult(BaseModel):
    """Outcome of one model in a benchmark run"""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    rank: Optional[int] = None
    is_winner: bool = Field(default=False, alias="isWinner")
    model_id: str = Field(..., alias="modelId")
    model_name: str = Field(..., alias="modelName")
    status: str = Field(..., description="success or error")
    result: str = ""
    explanation: str = ""
    response_time_ms: float = Field(default=0.0, alias="responseTimeMs")
    token_count: int = Field(default=0, alias="tokenCount")
    estimated_cost_usd: float = Field(default=0.0, alias="estimatedCostUSD")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")


class BenchmarkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_text: str = Field(..., alias="from")
    to_text: str = Field(..., alias="to")
    results: List[BenchmarkResult]


class ModelOption(BaseModel):
    label: str
    value: str


class ModelCatalog(BaseModel):
    """Selectable models and the configured default"""
    default_model: str = Field(..., alias="defaultModel")
    options: List[ModelOption]

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())
