"""Domain modules for scoring."""

from .engine import ScoringEngine
from .models import DomainDescription, DomainScores, ScoreFactor
from .weights import DEFAULT_WEIGHTS, ScoringWeights

__all__ = [
    "DEFAULT_WEIGHTS",
    "DomainDescription",
    "DomainScores",
    "ScoreFactor",
    "ScoringEngine",
    "ScoringWeights",
]
