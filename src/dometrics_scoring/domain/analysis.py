"""Rule-based investment outlook for a scored domain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .models import DomainScores, MarketData

Outlook = Literal["excellent", "good", "fair", "high-risk"]

ANALYSIS_CONFIDENCE = 65
SHORT_NAME_LENGTH = 6
STRONG_SCORE = 60
ACTIVE_OFFER_COUNT = 3
EXPIRY_WARNING_DAYS = 90
LOW_ACTIVITY_30D = 5

_RECOMMENDATIONS: dict[Outlook, str] = {
    "excellent": "Strong buy recommendation",
    "good": "Consider acquiring if price is reasonable",
    "fair": "Monitor for better opportunities",
    "high-risk": "Proceed with extreme caution",
}


@dataclass(frozen=True)
class DomainAnalysis:
    summary: str
    outlook: Outlook
    strengths: tuple[str, ...]
    risks: tuple[str, ...]
    recommendation: str
    confidence: int

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary,
            "outlook": self.outlook,
            "strengths": list(self.strengths),
            "risks": list(self.risks),
            "recommendation": self.recommendation,
            "confidence": self.confidence,
        }


def classify_outlook(risk: int, rarity: int) -> Outlook:
    if risk < 30 and rarity > 70:
        return "excellent"
    if risk < 50 and rarity > 50:
        return "good"
    if risk > 70:
        return "high-risk"
    return "fair"


def _summary(full_name: str, outlook: Outlook) -> str:
    if outlook == "excellent":
        return (
            f"{full_name} presents an excellent investment opportunity "
            "with low risk and high rarity."
        )
    if outlook == "good":
        return (
            f"{full_name} shows good potential "
            "with manageable risk and solid value characteristics."
        )
    if outlook == "high-risk":
        return f"{full_name} carries significant risk factors that require careful consideration."
    return (
        f"{full_name} presents a moderate investment opportunity "
        "with standard market characteristics."
    )


def analyze(name: str, tld: str, scores: DomainScores, market: MarketData) -> DomainAnalysis:
    """Summarise a scored domain as strengths, risks and a recommendation."""
    outlook = classify_outlook(scores.risk, scores.rarity)

    strengths: list[str] = []
    if len(name) <= SHORT_NAME_LENGTH:
        strengths.append("Short, memorable domain name")
    if scores.rarity > STRONG_SCORE:
        strengths.append("Above-average rarity score")
    if scores.momentum > STRONG_SCORE:
        strengths.append("Strong market momentum")
    if tld.lower() == "com":
        strengths.append("Premium .com extension")
    if market.offer_count > ACTIVE_OFFER_COUNT:
        strengths.append("Active market interest")

    risks: list[str] = []
    if market.days_until_expiry < EXPIRY_WARNING_DAYS:
        risks.append("Approaching expiration date")
    if scores.risk > STRONG_SCORE:
        risks.append("High risk score requires attention")
    if market.transfer_lock:
        risks.append("Transfer restrictions in place")
    if market.activity_30d < LOW_ACTIVITY_30D:
        risks.append("Limited recent market activity")

    return DomainAnalysis(
        summary=_summary(f"{name}.{tld}", outlook),
        outlook=outlook,
        strengths=tuple(strengths) or ("Basic domain characteristics",),
        risks=tuple(risks) or ("Standard market risks",),
        recommendation=_RECOMMENDATIONS[outlook],
        confidence=ANALYSIS_CONFIDENCE,
    )
