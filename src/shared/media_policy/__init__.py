from .classifier import category_of, effective_limit, exceeds_limit, extension_of, should_download
from .models import EXTENSION_CATEGORIES, MediaCategory, parse_category

__all__ = [
    "EXTENSION_CATEGORIES",
    "MediaCategory",
    "category_of",
    "effective_limit",
    "exceeds_limit",
    "extension_of",
    "parse_category",
    "should_download",
]
