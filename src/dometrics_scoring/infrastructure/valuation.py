"""Chat-completion valuation collaborator for ``ScoringEngine.score_async``.

Usage example:
    import asyncio

    from dometrics_scoring.domain.engine import ScoringEngine
    from dometrics_scoring.infrastructure.valuation import ChatCompletionValuationService

    service = ChatCompletionValuationService(api_key="sk-...")
    scores = asyncio.run(ScoringEngine().score_async(domain, service))
"""

from __future__ import annotations

import re
from typing import Any, override

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import DEFAULT_VALUATION_BASE_URL, DEFAULT_VALUATION_MODEL
from ..domain.models import MarketData, ScoreFactor, ValueEstimate
from ..exceptions import ValuationServiceError
from ..protocols import ValuationService

_SYSTEM_PROMPT = (
    "You are an expert domain appraiser with deep knowledge of domain values, market trends, "
    "branding, SEO value, and commercial potential. Provide detailed, accurate domain "
    "valuations in JSON format."
)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_DEFAULT_CONFIDENCE = 75.0
_DEFAULT_PROJECTION = 1.1


class _FactorPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    value: float
    weight: float
    contribution: float
    description: str = ""


class _ValuationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    current_value: float = Field(alias="currentValue")
    projected_value: float | None = Field(default=None, alias="projectedValue")
    confidence: float = _DEFAULT_CONFIDENCE
    factors: list[_FactorPayload] = Field(default_factory=list)


def build_valuation_prompt(name: str, tld: str, market: MarketData) -> str:
    """Render the user prompt describing one domain and its market context."""
    return (
        f'Please provide a comprehensive valuation for the domain "{name}.{tld}".\n\n'
        "Domain Details:\n"
        f"- Full domain: {name}.{tld}\n"
        f"- Name part: {name}\n"
        f"- TLD: .{tld}\n"
        f"- Days until expiry: {market.days_until_expiry}\n"
        f"- Recent offers: {market.offer_count}\n"
        f"- 30-day activity: {market.activity_30d}\n"
        f"- Registrar: {market.registrar}\n"
        f"- Transfer locked: {str(market.transfer_lock).lower()}\n\n"
        "Respond with a JSON object with the fields currentValue (estimated current USD value), "
        "projectedValue (6-month projected USD value), confidence (0-100) and factors "
        "(a list of {name, value, weight, contribution, description})."
    )


def _response_details(response: httpx.Response) -> str:
    """Return a compact status/body summary for error reporting."""
    body = " ".join(response.text.split())
    if len(body) > 300:
        body = body[:300] + "..."
    return f"status={response.status_code}, body={body}"


def _message_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValuationServiceError("response has no message content") from exc
    if not isinstance(content, str) or not content.strip():
        raise ValuationServiceError("response has no message content")
    return content


def parse_valuation_content(content: str) -> ValueEstimate:
    """Extract the JSON object embedded in a model reply and convert it.

    Raises:
        ValuationServiceError: If no JSON object is found or it fails validation.
    """
    match = _JSON_OBJECT.search(content)
    if match is None:
        raise ValuationServiceError("no JSON object in response")
    try:
        payload = _ValuationPayload.model_validate_json(match.group(0))
    except ValidationError as exc:
        detail = f"invalid valuation payload ({exc.error_count()} errors)"
        raise ValuationServiceError(detail) from exc

    projected = payload.projected_value
    if projected is None:
        projected = payload.current_value * _DEFAULT_PROJECTION
    return ValueEstimate(
        current_value=payload.current_value,
        projected_value=projected,
        confidence=round(payload.confidence),
        factors=tuple(
            ScoreFactor(
                name=factor.name,
                description=factor.description,
                value=factor.value,
                weight=factor.weight,
                contribution=factor.contribution,
            )
            for factor in payload.factors
        ),
        source="valuation_service",
    )


class ChatCompletionValuationService(ValuationService):
    """Valuation collaborator backed by an OpenAI-compatible chat completion API.

    Every failure surfaces as ``ValuationServiceError``; the engine then falls
    back to its deterministic estimate.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_VALUATION_BASE_URL,
        model: str = DEFAULT_VALUATION_MODEL,
        timeout_seconds: float = 8.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = client

    @override
    async def evaluate(self, name: str, tld: str, market: MarketData) -> ValueEstimate:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": build_valuation_prompt(name, tld, market)},
            ],
            "temperature": 0.3,
            "max_tokens": 1500,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self._client is not None:
                response = await self._client.post(self.base_url, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(self.base_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise ValuationServiceError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code != 200:
            raise ValuationServiceError(_response_details(response))
        try:
            data = response.json()
        except ValueError as exc:
            raise ValuationServiceError("response body is not JSON") from exc
        return parse_valuation_content(_message_content(data))
