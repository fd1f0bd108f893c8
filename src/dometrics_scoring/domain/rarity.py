"""Rarity calculator: lexical and TLD scarcity of a domain name (higher = rarer)."""

from __future__ import annotations

from typing import Literal

from .factors import clamp, interpolate, rank_factors
from .models import CategoryScore, DomainDescription, ScoreFactor
from .weights import ScoringWeights

NameStyle = Literal["dictionary", "brandable", "random"]

VOWELS = frozenset("aeiou")

_STYLE_LABELS: dict[NameStyle, str] = {
    "dictionary": "Dictionary word",
    "brandable": "Brandable",
    "random": "Random string",
}


def is_dictionary_word(name: str, weights: ScoringWeights) -> bool:
    return name.lower() in weights.reference.dictionary_words


def is_brandable(name: str, weights: ScoringWeights) -> bool:
    """Pronounceable-looking labels: bounded length with both vowels and consonants."""
    dictionary = weights.rarity.dictionary
    if not dictionary.brandable_min_length <= len(name) <= dictionary.brandable_max_length:
        return False
    letters = name.lower()
    has_vowel = any(char in VOWELS for char in letters)
    has_consonant = any(char.isalpha() and char not in VOWELS for char in letters)
    return has_vowel and has_consonant


def name_style(name: str, weights: ScoringWeights) -> NameStyle:
    if is_dictionary_word(name, weights):
        return "dictionary"
    if is_brandable(name, weights):
        return "brandable"
    return "random"


def length_rarity(length: int, weights: ScoringWeights) -> float:
    name_length = weights.rarity.name_length
    return interpolate(length, name_length.max_rarity_length, name_length.min_rarity_length)


def calculate_rarity(domain: DomainDescription, weights: ScoringWeights) -> CategoryScore:
    """Calculate the rarity score (0-100) and its top factors."""
    rarity = weights.rarity
    factors: list[ScoreFactor] = []

    length = len(domain.name)
    length_value = length_rarity(length, weights)
    factors.append(
        ScoreFactor(
            name="Name Length",
            description=f"{length} characters",
            value=length,
            weight=rarity.name_length.weight,
            contribution=length_value * rarity.name_length.weight,
        )
    )

    style = name_style(domain.name, weights)
    style_bonus = getattr(rarity.dictionary, style)
    factors.append(
        ScoreFactor(
            name="Brandability",
            description=_STYLE_LABELS[style],
            value=style_bonus,
            weight=rarity.dictionary.weight,
            contribution=style_bonus * rarity.dictionary.weight,
        )
    )

    bucket = weights.bucket_for(domain.tld)
    bucket_value = rarity.tld_scarcity.buckets.get(bucket, 0.0)
    factors.append(
        ScoreFactor(
            name="TLD Scarcity",
            description=f".{domain.tld} is {bucket}",
            value=bucket_value,
            weight=rarity.tld_scarcity.weight,
            contribution=bucket_value * rarity.tld_scarcity.weight,
        )
    )

    demand = rarity.historic_demand
    demand_value = min(demand.base_value, domain.offer_count * demand.per_offer)
    factors.append(
        ScoreFactor(
            name="Historic Demand",
            description=f"{domain.offer_count} unique bidders",
            value=domain.offer_count,
            weight=demand.weight,
            contribution=demand_value * demand.weight,
        )
    )

    score = sum(factor.contribution for factor in factors)
    return CategoryScore(score=clamp(score), factors=rank_factors(factors, rarity.top_factors))
