"""
Conversion data models used inside the pipeline
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


@dataclass(frozen=True)
class CurrencyPair:
    """Source and target currency codes detected in a request"""
    from_currency: str
    to_currency: str


@dataclass(frozen=True)
class RateTable:
    """One snapshot of exchange rates, all relative to ``base``"""
    base: str
    rates: Mapping[str, float]
    timestamp: int  # epoch milliseconds of the fetch

    def __post_init__(self):
        # Freeze the mapping so a cached table can be handed out without copies
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_of(self, code: str) -> Optional[float]:
        if code == self.base:
            return 1.0
        return self.rates.get(code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "rates": dict(self.rates),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ConversionQuote:
    """A single currency conversion computed from a RateTable"""
    amount: float
    converted_amount: float
    from_currency: str
    to_currency: str
    rate: float
    timestamp: int
    base: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "convertedAmount": self.converted_amount,
            "from": self.from_currency,
            "to": self.to_currency,
            "rate": self.rate,
            "timestamp": self.timestamp,
            "base": self.base,
        }


@dataclass
class ConversionAnswer:
    """The two-field answer contract shared by the model and the validator"""
    result: str = ""
    explanation: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"result": self.result, "explanation": self.explanation}


@dataclass
class ParsedAnswer:
    """Model output that honoured the JSON contract"""
    answer: ConversionAnswer

    def to_answer(self) -> ConversionAnswer:
        return self.answer


@dataclass
class UnparsedAnswer:
    """Model output that broke the contract; the text becomes the explanation"""
    raw_text: str

    def to_answer(self) -> ConversionAnswer:
        return ConversionAnswer(result="", explanation=self.raw_text)


AnswerParse = Union[ParsedAnswer, UnparsedAnswer]


# Identifiers that mean "no real choice was made" in the model picker
PLACEHOLDER_MODELS = frozenset({
    "model",
    "model_id",
    "choose-a-model",
    "select-a-model",
    "openrouter/auto",
})


@dataclass(frozen=True)
class ModelSelection:
    """Either the configured default model or one explicitly named model"""
    name: Optional[str] = None

    @classmethod
    def from_request(cls, requested: Optional[str]) -> "ModelSelection":
        """Resolve a caller-supplied model name once, at the HTTP boundary."""
        if not isinstance(requested, str):
            return cls()
        value = requested.strip()
        lowered = value.lower()
        if not value or "placeholder" in lowered or lowered in PLACEHOLDER_MODELS:
            return cls()
        return cls(name=value)

    @property
    def is_default(self) -> bool:
        return self.name is None

    def resolve(self, default_model: str) -> str:
        return default_model if self.name is None else self.name


@dataclass
class ValidationOutcome:
    """Result of the corrective validator pass: an answer or an error"""
    answer: Optional[str] = None
    error: Optional[Exception] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.answer and self.answer.strip())

    def unwrap_or(self, fallback: str) -> str:
        return self.answer if self.ok else fallback
