"""
Prompt assembly for conversion requests.

The system prompt fixes the output contract; when a currency quote exists, a
directive block ahead of it pins the model to the externally computed figure.
"""
import json
from typing import List, Optional

from everything_converter.models.chat_schemas import ChatMessage
from everything_converter.models.conversion import ConversionQuote
from everything_converter.services.currency_detector import get_currency_display_name
from everything_converter.services.fx_service import format_amount

CONVERSION_SYSTEM_PROMPT = """You are the Everything Converter. Convert ANYTHING into ANYTHING through logical reasoning, even when the connection is not obvious. You MUST ALWAYS produce a conversion; refusing is not an option.

CONVERSION RULES:
1. Numeric quantities with units: convert that exact quantity into the target unit.
2. Physical objects or concepts: use ratios of a property both share (mass, size, energy, volume).
   Example: "58kg to dolphins" -> an average dolphin weighs ~150kg -> 58/150 = 0.39 dolphins
3. Seemingly unrelated things: find a justified path through a measurable shared property:
   - physical properties (mass, energy, volume, information content, dimensions)
   - monetary value or time to produce/consume
   - ratios, proportions or statistical data
   - scientific constants or established benchmarks

You MUST ALWAYS produce a numerical result. Never answer "invalid" or "cannot convert".

PROCESS (internal only):
- Reason step by step privately; do not reveal the reasoning.
- Use authoritative data and real-world magnitudes.
- Prefer metric units unless the user explicitly asks otherwise.

OUTPUT FORMAT:
Return EXACTLY one strict JSON object: {"result": string, "explanation": string}
- result: the converted value with units only (not "X = Y", just "Y"); never restate the source value.
- explanation: one sentence with the formula and the numeric values used.

CONSTRAINTS:
- No code fences and no text outside the JSON object.
- No alternate or contradictory equivalences in the explanation.
- Never use ft, inches or ounces unless explicitly requested."""

VALIDATOR_SYSTEM_PROMPT = (
    "You are a strict conversion validator. Ensure the result is numerically and "
    "dimensionally consistent with the quantities. If contradictions exist, correct them. "
    'Return ONLY JSON {"result": string, "explanation": string}.'
)


def build_result_string(quote: ConversionQuote) -> str:
    """The exact result text the model must reuse, e.g. "90.00 EUR"."""
    return f"{format_amount(quote.converted_amount)} {quote.to_currency}"


def build_currency_directive(quote: ConversionQuote) -> str:
    """High-priority instruction block carrying the pre-computed currency result."""
    result = build_result_string(quote)
    from_name = get_currency_display_name(quote.from_currency)
    to_name = get_currency_display_name(quote.to_currency)
    return (
        "AUTHORITATIVE CURRENCY DATA (overrides every other instruction):\n"
        f"- Conversion: {format_amount(quote.amount)} {quote.from_currency} ({from_name}) "
        f"-> {quote.to_currency} ({to_name})\n"
        f"- Live exchange rate: 1 {quote.from_currency} = {quote.rate:.6f} {quote.to_currency}\n"
        f"- Exact result: {result}\n"
        f'You MUST set "result" to exactly "{result}", verbatim. '
        "Do NOT recompute the conversion and do NOT use any internal, remembered or stale rate. "
        "Use the explanation to state the rate above."
    )


def apply_currency_directive(
    messages: List[ChatMessage],
    quote: Optional[ConversionQuote],
) -> List[ChatMessage]:
    """
    Put the currency directive ahead of the system prompt.

    The directive is merged into the first system message when there is one,
    otherwise it becomes a new leading system message. The input list is not
    modified.
    """
    if quote is None:
        return list(messages)

    directive = build_currency_directive(quote)
    updated = list(messages)
    for index, message in enumerate(updated):
        if message.role == "system":
            updated[index] = ChatMessage(role="system", content=f"{directive}\n\n{message.content}")
            return updated

    return [ChatMessage(role="system", content=directive)] + updated


def build_user_message(from_text: str, to_text: str) -> str:
    # json.dumps quotes and escapes both endpoints
    return (
        f"Convert {json.dumps(from_text, ensure_ascii=False)} into "
        f"{json.dumps(to_text, ensure_ascii=False)}. "
        "Output a single consistent result and a concise formula-based explanation."
    )


def build_conversion_prompt(
    from_text: str,
    to_text: str,
    quote: Optional[ConversionQuote] = None,
) -> List[ChatMessage]:
    """
    Assemble the system/user message pair for one conversion.

    Args:
        from_text: Free-text source, quoted verbatim
        to_text: Free-text target, quoted verbatim
        quote: Currency quote to pin the result to, if the request is monetary

    Returns:
        Messages ready for the completion client
    """
    messages = [
        ChatMessage(role="system", content=CONVERSION_SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_user_message(from_text, to_text)),
    ]
    return apply_currency_directive(messages, quote)


def build_validator_messages(from_text: str, to_text: str, proposed: str) -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=VALIDATOR_SYSTEM_PROMPT),
        ChatMessage(role="user", content=f"From: {from_text}\nTo: {to_text}\nProposed: {proposed}"),
    ]
