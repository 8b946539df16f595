"""
Health Score Service

Pure heuristics turning ingredients and nutrition facts into:
- a health score from 1 (worst) to 10 (best), or None when not computable
- a short list of human-readable ingredient warnings

No I/O and no failures: every function is total over its inputs.
"""

from typing import List, Optional, Sequence

from foodscan.core.constants import (
    HEALTH_SCORE_CONFIG,
    HEALTH_SCORE_MIN,
    HEALTH_SCORE_MAX,
    ALLERGEN_WARNINGS,
    CONCERNING_SUBSTANCE_WARNINGS,
    ALLERGY_WARNING_MARKER,
    MAX_WARNINGS,
)
from foodscan.schemas.product import NutritionInfo, NormalizedProduct


def _decrement(score: int) -> int:
    return max(HEALTH_SCORE_MIN, score - 1)


def _increment(score: int) -> int:
    return min(HEALTH_SCORE_MAX, score + 1)


def compute_health_score(
    ingredients: Sequence[str],
    nutrition_info: Optional[NutritionInfo] = None
) -> Optional[int]:
    """
    Calculate the health score of a product.

    Starts from the baseline (7). Each ingredient adjusts the score at most
    once: concerning terms are checked before beneficial ones. Nutrition
    thresholds then apply independently. The score is clamped to [1, 10]
    after every single adjustment, so the order of the steps matters.

    Args:
        ingredients: Parsed ingredient strings
        nutrition_info: Optional nutrition facts

    Returns:
        Score in [1, 10], or None when there are no ingredients
    """
    if not ingredients:
        return None

    score = HEALTH_SCORE_CONFIG["base_score"]
    concerning = HEALTH_SCORE_CONFIG["concerning_ingredients"]
    beneficial = HEALTH_SCORE_CONFIG["beneficial_ingredients"]

    for ingredient in ingredients:
        ingredient_lower = ingredient.lower()
        if any(term in ingredient_lower for term in concerning):
            score = _decrement(score)
        elif any(term in ingredient_lower for term in beneficial):
            score = _increment(score)

    if nutrition_info is not None:
        thresholds = HEALTH_SCORE_CONFIG["thresholds"]

        if nutrition_info.sodium is not None and nutrition_info.sodium > thresholds["sodium"]:
            score = _decrement(score)

        if nutrition_info.saturated_fat is not None and nutrition_info.saturated_fat > thresholds["saturated_fat"]:
            score = _decrement(score)

        if nutrition_info.sugars is not None and nutrition_info.sugars > thresholds["sugars"]:
            score = _decrement(score)

        if nutrition_info.calories is not None and nutrition_info.calories < thresholds["low_calories"]:
            score = _increment(score)

    return score


def derive_warnings(ingredients: Sequence[str]) -> List[str]:
    """
    Build the warning list for a product's ingredients.

    For every ingredient, in order:
    - the first matching allergen entry is added, unless a warning mentioning
      "allergic" is already in the list;
    - the first matching concerning-substance entry is added (no guard, so
      several of these can accumulate).

    Only the first five warnings are kept.
    """
    warnings: List[str] = []

    for ingredient in ingredients:
        ingredient_lower = ingredient.lower()

        for allergen, warning in ALLERGEN_WARNINGS.items():
            if allergen in ingredient_lower and not any(ALLERGY_WARNING_MARKER in w for w in warnings):
                warnings.append(warning)
                break

        for substance, warning in CONCERNING_SUBSTANCE_WARNINGS.items():
            if substance in ingredient_lower:
                warnings.append(warning)
                break

    return warnings[:MAX_WARNINGS]


def analyze_product(product: NormalizedProduct) -> NormalizedProduct:
    """Return a copy of the product with health_score and warnings derived."""
    return product.model_copy(update={
        "health_score": compute_health_score(product.ingredients, product.nutrition_info),
        "warnings": derive_warnings(product.ingredients),
    })
