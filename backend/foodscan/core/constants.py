"""
Application Constants
Defines constant values used throughout the application.

This module contains all application-wide constants including:
- Product sources
- Health score configuration (baseline, thresholds, ingredient lists)
- Warning lookup tables
- Normalisation and bulk import limits
"""

# Product Sources
SOURCE_MANUAL = "manual"  # Entered by hand
SOURCE_OPENFOODFACTS = "openfoodfacts"  # Open Food Facts database

# Health Score (1 = worst, 10 = best)
HEALTH_SCORE_MIN = 1
HEALTH_SCORE_MAX = 10

HEALTH_SCORE_CONFIG = {
    "base_score": 7,
    "thresholds": {
        "sodium": 500,  # mg per serving
        "saturated_fat": 5,  # g per serving
        "sugars": 15,  # g per serving
        "low_calories": 100,  # kcal per serving
    },
    "concerning_ingredients": [
        "high fructose corn syrup",
        "hydrogenated oil",
        "partially hydrogenated",
        "artificial flavor",
        "artificial color",
        "sodium benzoate",
        "potassium sorbate",
        "msg",
        "monosodium glutamate",
        "food coloring",
        "caramel color",
        "sucralose",
        "aspartame",
        "acesulfame potassium",
        "propylene glycol",
        "sodium nitrate",
        "sodium nitrite",
        "bht",
        "bha",
    ],
    "beneficial_ingredients": [
        "organic",
        "whole grain",
        "whole wheat",
        "extra virgin olive oil",
        "natural flavor",
        "raw",
        "unprocessed",
        "cold pressed",
        "grass fed",
        "free range",
        "wild caught",
        "vine ripened",
        "non gmo",
        "no artificial",
        "gluten free",
        "dairy free",
    ],
}

# Warnings
# Order matters: the first matching entry wins for each ingredient.
ALLERGEN_WARNINGS = {
    "milk": "Contains dairy - may cause allergic reactions",
    "wheat": "Contains gluten - may cause celiac reactions",
    "soy": "Contains soy - common allergen",
    "peanut": "Contains peanuts - severe allergic reactions",
    "tree nut": "Contains tree nuts - severe allergic reactions",
    "egg": "Contains eggs - common allergen",
    "fish": "Contains fish - may trigger allergic reactions",
    "shellfish": "Contains shellfish - may trigger allergic reactions",
}

CONCERNING_SUBSTANCE_WARNINGS = {
    "aspartame": "Contains artificial sweetener - may cause sensitivities",
    "high fructose corn syrup": "Contains refined sugar - may impact metabolism",
    "hydrogenated": "Contains hydrogenated oils - contains trans fats",
    "msg": "Contains MSG - may cause sensitivities in some people",
    "sodium nitrate": "Contains sodium nitrite - processed meat preservative",
}

ALLERGY_WARNING_MARKER = "allergic"  # At most one warning carrying this word

# Product Field Limits
MAX_WARNINGS = 5
MAX_INGREDIENTS = 50
MAX_ALLERGENS = 10
UNKNOWN_PRODUCT_NAME = "Unknown Product"
DEFAULT_SERVING_SIZE = "100g"  # Open Food Facts reports per 100g

# Bulk Import
MAX_SEARCH_TERMS = 5
DEFAULT_LIMIT_PER_TERM = 10
MIN_LIMIT_PER_TERM = 1
MAX_LIMIT_PER_TERM = 50

# Barcode Validation
BARCODE_MAX_LENGTH = 32
BARCODE_PATTERN = r"^\d{8,32}$"

# Pagination
DEFAULT_PAGE_SIZE = 20  # Default number of items per page
MAX_PAGE_SIZE = 100  # Maximum items per page
