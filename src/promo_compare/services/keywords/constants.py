"""Static dictionaries used for keyword expansion and token matching.

Contains:
- Keyword set bounds
- Stop words (articles, packaging and unit words)
- Synonym dictionary grouped by grocery category
- Brand list and orthographic variants
- Quantity/format pattern

All mappings are read-only and built once at import time. Dictionary keys
are in normalised form (lower case, no diacritics); synonym values are the
literal strings sent to the promotion search and may carry accents.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Final


# =============================================================================
# Keyword Set Bounds
# =============================================================================

MAX_KEYWORDS: Final[int] = 20
MIN_KEYWORD_LENGTH: Final[int] = 2
MAX_KEYWORD_LENGTH: Final[int] = 40


# =============================================================================
# Stop Words
# =============================================================================
# Articles and conjunctions (fr/en), generic packaging words, unit words

# fmt: off
STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        # Articles, prepositions, conjunctions
        "le", "la", "les", "un", "une", "des", "de", "du", "et", "ou",
        "avec", "sans", "en", "au", "aux", "pour", "sur", "par",
        "the", "an", "and", "or", "of", "with", "for", "in",
        # Packaging / generic
        "produit", "product", "article", "item", "sac", "pack", "paquet",
        "boite", "can", "bouteille", "bottle", "format", "size", "gros",
        "grand", "petit", "mini", "family", "familial", "emballage",
        "sachet", "contenant", "unite", "unit", "assortis", "assorted",
        "variete", "varietes", "choix", "selectionnes", "selected",
        # Units
        "kg", "ml", "lb", "lbs", "oz", "gr", "ch", "ea",
    }
)


# =============================================================================
# Synonym Dictionary
# =============================================================================
# category -> {normalised term -> ordered synonyms, brands and translations}

SYNONYM_CATEGORIES: Final[Mapping[str, Mapping[str, tuple[str, ...]]]] = (
    MappingProxyType(
        {
            "dairy": MappingProxyType(
                {
                    "lait": ("milk", "lait 2%", "lait entier", "whole milk", "natrel", "lactantia"),
                    "milk": ("lait", "2% milk", "skim milk"),
                    "fromage": ("cheese", "cheddar", "mozzarella", "gouda", "brick", "marble"),
                    "cheese": ("fromage", "cheddar", "mozzarella"),
                    "beurre": ("butter", "margarine", "becel"),
                    "butter": ("beurre", "margarine"),
                    "yogourt": ("yogurt", "yaourt", "yogourt grec", "greek yogurt", "oikos", "liberte"),
                    "yogurt": ("yogourt", "yaourt"),
                    "creme": ("cream", "crème", "creme fraiche", "whipping cream", "creme sure"),
                    "cream": ("crème", "whipping cream", "sour cream"),
                }
            ),
            "eggs": MappingProxyType(
                {
                    "oeuf": ("egg", "eggs", "oeufs", "œuf", "œufs", "large eggs", "burnbrae"),
                    "oeufs": ("eggs", "oeuf", "œufs", "gros oeufs", "burnbrae"),
                    "egg": ("oeuf", "oeufs", "eggs"),
                    "eggs": ("oeufs", "egg"),
                }
            ),
            "bread_pasta": MappingProxyType(
                {
                    "pain": ("bread", "pain blanc", "pain tranche", "baguette", "pom", "dempsters"),
                    "bread": ("pain", "white bread", "whole wheat"),
                    "pate": ("pasta", "pâtes", "spaghetti", "macaroni", "penne", "catelli"),
                    "pates": ("pasta", "pâtes", "spaghetti", "macaroni", "penne", "catelli"),
                    "pasta": ("pâtes", "spaghetti", "penne", "barilla"),
                    "spaghetti": ("pâtes", "pasta", "catelli"),
                    "bagel": ("bagels", "st-viateur"),
                }
            ),
            "rice_cereal": MappingProxyType(
                {
                    "riz": ("rice", "riz blanc", "white rice", "basmati", "jasmin", "uncle bens"),
                    "rice": ("riz", "basmati", "jasmine"),
                    "cereales": ("cereal", "céréales", "cheerios", "corn flakes", "special k"),
                    "cereal": ("céréales", "cheerios", "corn flakes"),
                    "gruau": ("oatmeal", "avoine", "quaker"),
                    "avoine": ("oats", "gruau", "quaker"),
                }
            ),
            "meats": MappingProxyType(
                {
                    "poulet": ("chicken", "volaille", "poitrine", "cuisse", "pilon"),
                    "chicken": ("poulet", "breast", "thighs", "drumsticks"),
                    "boeuf": ("beef", "bœuf", "steak", "boeuf hache", "ground beef"),
                    "beef": ("boeuf", "bœuf", "steak", "ground beef"),
                    "porc": ("pork", "cotelette", "longe", "filet de porc"),
                    "pork": ("porc", "chops", "tenderloin"),
                    "jambon": ("ham", "jambon tranche"),
                    "bacon": ("lard", "bacon tranche"),
                    "saucisse": ("sausage", "saucisses", "hot dog"),
                    "dinde": ("turkey", "poitrine de dinde"),
                }
            ),
            "fish": MappingProxyType(
                {
                    "poisson": ("fish", "saumon", "salmon", "tilapia", "morue"),
                    "saumon": ("salmon", "atlantic salmon", "filet de saumon"),
                    "salmon": ("saumon",),
                    "thon": ("tuna", "thon pale", "clover leaf", "rio mare"),
                    "tuna": ("thon", "clover leaf"),
                    "crevette": ("shrimp", "crevettes", "shrimps"),
                    "crevettes": ("shrimp", "crevette"),
                }
            ),
            "produce": MappingProxyType(
                {
                    "pomme": ("apple", "pommes", "apples", "gala", "mcintosh", "honeycrisp"),
                    "pommes": ("apples", "pomme", "gala", "mcintosh"),
                    "banane": ("banana", "bananes", "bananas"),
                    "bananes": ("bananas", "banane"),
                    "orange": ("oranges", "navel"),
                    "fraise": ("strawberry", "fraises", "strawberries"),
                    "fraises": ("strawberries", "fraise"),
                    "raisin": ("grape", "raisins", "grapes"),
                    "tomate": ("tomato", "tomates", "tomatoes"),
                    "tomates": ("tomatoes", "tomate"),
                    "carotte": ("carrot", "carottes", "carrots"),
                    "carottes": ("carrots", "carotte"),
                    "oignon": ("onion", "oignons", "onions"),
                    "oignons": ("onions", "oignon"),
                    "patate": ("potato", "potatoes", "pomme de terre", "pommes de terre"),
                    "patates": ("potatoes", "pommes de terre"),
                    "laitue": ("lettuce", "romaine", "iceberg"),
                    "brocoli": ("broccoli",),
                    "concombre": ("cucumber", "concombres"),
                    "poivron": ("pepper", "poivrons", "bell pepper"),
                    "avocat": ("avocado", "avocats", "avocados"),
                }
            ),
            "sauces_condiments": MappingProxyType(
                {
                    "sauce": ("sauce tomate", "tomato sauce", "pasta sauce", "ragu", "classico"),
                    "ketchup": ("catsup", "heinz"),
                    "mayonnaise": ("mayo", "hellmanns", "kraft"),
                    "moutarde": ("mustard", "french s", "dijon"),
                    "mustard": ("moutarde", "dijon"),
                    "vinaigrette": ("salad dressing", "dressing", "kraft"),
                    "salsa": ("old el paso", "tostitos"),
                }
            ),
            "oils_vinegars": MappingProxyType(
                {
                    "huile": ("oil", "huile olive", "huile vegetale", "huile canola", "olive oil"),
                    "oil": ("huile", "olive oil", "canola oil"),
                    "olive": ("huile olive", "olive oil", "bertolli"),
                    "vinaigre": ("vinegar", "vinaigre blanc", "balsamique"),
                    "vinegar": ("vinaigre", "balsamic"),
                }
            ),
            "sugar_flour": MappingProxyType(
                {
                    "sucre": ("sugar", "sucre blanc", "cassonade", "lantic", "redpath"),
                    "sugar": ("sucre", "brown sugar", "lantic"),
                    "farine": ("flour", "farine tout usage", "robin hood", "five roses"),
                    "flour": ("farine", "all purpose", "robin hood"),
                    "sirop": ("syrup", "sirop erable", "maple syrup"),
                    "erable": ("maple", "sirop erable", "maple syrup"),
                    "sel": ("salt", "windsor"),
                }
            ),
            "beverages": MappingProxyType(
                {
                    "jus": ("juice", "jus orange", "orange juice", "oasis", "tropicana", "minute maid"),
                    "juice": ("jus", "orange juice", "tropicana"),
                    "eau": ("water", "eau de source", "spring water", "eska", "naya"),
                    "water": ("eau", "spring water"),
                    "cafe": ("coffee", "café", "nescafe", "maxwell house", "folgers", "van houtte"),
                    "coffee": ("café", "nescafe", "folgers"),
                    "tea": ("thé", "tisane", "red rose", "tetley", "lipton"),
                    "liqueur": ("soda", "boisson gazeuse", "coca cola", "pepsi"),
                    "soda": ("boisson gazeuse", "liqueur", "pepsi", "coca cola"),
                    "biere": ("beer", "bière"),
                }
            ),
            "snacks": MappingProxyType(
                {
                    "chips": ("croustilles", "crisps", "lays", "doritos", "ruffles"),
                    "croustilles": ("chips", "lays", "ruffles"),
                    "biscuit": ("cookie", "biscuits", "cookies", "oreo", "dare"),
                    "biscuits": ("cookies", "biscuit", "oreo"),
                    "cookie": ("biscuit", "biscuits"),
                    "chocolat": ("chocolate", "lindt", "cadbury", "hershey"),
                    "chocolate": ("chocolat", "cadbury"),
                    "craquelins": ("crackers", "triscuit", "ritz"),
                    "crackers": ("craquelins", "ritz"),
                    "noix": ("nuts", "amandes", "almonds", "arachides"),
                }
            ),
            "frozen": MappingProxyType(
                {
                    "pizza": ("pizza surgelee", "frozen pizza", "delissio", "mccain"),
                    "surgele": ("frozen", "surgelé", "congelé"),
                    "surgeles": ("frozen", "surgelés", "legumes surgeles"),
                    "frites": ("fries", "french fries", "mccain"),
                    "glacee": ("ice cream", "crème glacée", "creme glacee", "chapman s", "breyers"),
                    "frozen": ("surgelé", "surgelés"),
                }
            ),
            "cleaning": MappingProxyType(
                {
                    "detergent": ("détergent", "laundry", "lessive", "tide", "gain", "arm hammer"),
                    "lessive": ("détergent", "laundry detergent", "tide"),
                    "savon": ("soap", "savon vaisselle", "dish soap", "dawn", "palmolive"),
                    "soap": ("savon", "dish soap", "dawn"),
                    "javellisant": ("bleach", "javel", "clorox"),
                    "bleach": ("javellisant", "javel", "clorox"),
                    "nettoyant": ("cleaner", "lysol", "mr net", "vim"),
                    "essuie": ("paper towel", "essuie tout", "bounty", "sponge towels"),
                    "papier": ("papier hygienique", "toilet paper", "cashmere", "royale", "charmin"),
                }
            ),
        }
    )
)
# fmt: on


def _flatten(
    categories: Mapping[str, Mapping[str, tuple[str, ...]]],
) -> Mapping[str, tuple[str, ...]]:
    """Merge category dictionaries into one term index, keeping first-seen order."""
    merged: dict[str, list[str]] = {}
    for terms in categories.values():
        for term, synonyms in terms.items():
            bucket = merged.setdefault(term, [])
            bucket.extend(s for s in synonyms if s not in bucket)
    return MappingProxyType({term: tuple(values) for term, values in merged.items()})


SYNONYMS: Final[Mapping[str, tuple[str, ...]]] = _flatten(SYNONYM_CATEGORIES)


# =============================================================================
# Brands
# =============================================================================
# Normalised brand names detected as whole words in a product query

# fmt: off
BRANDS: Final[tuple[str, ...]] = (
    # Dairy
    "natrel", "lactantia", "quebon", "sealtest", "neilson", "agropur",
    "oikos", "liberte", "danone", "yoplait", "black diamond", "cracker barrel",
    "philadelphia", "balderson", "saputo", "becel",
    # Grocery
    "kraft", "heinz", "catelli", "barilla", "uncle bens", "quaker", "kellogg",
    "cheerios", "robin hood", "five roses", "lantic", "redpath", "clover leaf",
    "rio mare", "hellmanns", "classico", "ragu", "old el paso", "campbell",
    "dempsters", "pom", "villaggio", "bertolli", "burnbrae", "maple leaf",
    "schneiders", "lafleur", "olymel", "mccain", "delissio",
    # Beverages and snacks
    "oasis", "tropicana", "minute maid", "nescafe", "maxwell house", "folgers",
    "van houtte", "tim hortons", "red rose", "tetley", "lipton", "pepsi",
    "coca cola", "eska", "naya", "lays", "doritos", "ruffles", "oreo", "dare",
    "cadbury", "lindt", "hershey", "ritz", "triscuit",
    # Household
    "tide", "gain", "dawn", "palmolive", "lysol", "clorox", "cashmere",
    "royale", "charmin", "bounty",
    # Store brands
    "great value", "compliments", "selection", "irresistibles", "no name",
    "president s choice", "sans nom",
)
# fmt: on


# =============================================================================
# Orthographic Variants
# =============================================================================
# Normalised token -> alternate spellings found in retailer product names

ORTHOGRAPHIC_VARIANTS: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "oeuf": ("œuf",),
        "oeufs": ("œufs",),
        "boeuf": ("bœuf",),
        "cafe": ("café",),
        "creme": ("crème",),
        "pate": ("pâte",),
        "pates": ("pâtes",),
        "cereales": ("céréales",),
        "legumes": ("légumes",),
        "peches": ("pêches",),
        "epices": ("épices",),
        "biere": ("bière",),
        "surgele": ("surgelé",),
        "erable": ("érable",),
        "yogourt": ("yaourt", "yogurt"),
        "yaourt": ("yogourt",),
        "yogurt": ("yogourt",),
        "ketchup": ("catsup",),
        "catsup": ("ketchup",),
    }
)


# =============================================================================
# Quantity / Format Pattern
# =============================================================================
# A number followed by %, L, kg, g, lb or mL ("2%", "2l", "500 ml", "1.5 kg")

FORMAT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?<![\w.,])\d+(?:[.,]\d+)?\s?(?:%|kg|ml|lb|l|g)(?![a-z0-9])"
)

# Tokens that only carry a quantity once punctuation is gone ("2l", "500g", "12")
QUANTITY_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\d+(?:kg|ml|lb|lbs|oz|l|g|x)?$"
)
