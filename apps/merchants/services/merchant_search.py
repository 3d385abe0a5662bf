"""Merchant deduplication using ICO and fuzzy company-name matching."""

from typing import List, Optional, Tuple
import re

from django.conf import settings
from fuzzywuzzy import fuzz

from ..models import Merchant


def normalize_text(text: str) -> str:
    """
    Normalize text for comparison.

    Args:
        text: Text to normalize

    Returns:
        Normalized lowercase text
    """
    text = (text or '').lower().strip()
    text = re.sub(r'\s+', ' ', text)
    text = re.sub(r'[^\w\s-]', '', text)
    return text


def find_similar_merchants(
    *,
    company_name: str,
    ico: str = '',
    threshold: Optional[int] = None,
    exclude_id=None
) -> List[Tuple[Merchant, int, str]]:
    """
    Find merchants that are probably the same company.

    Args:
        company_name: Company name to check
        ico: Company registration number; an exact match scores 100
        threshold: Minimum name similarity (0-100)
        exclude_id: Merchant to leave out (when checking an existing one)

    Returns:
        List of (merchant, similarity_score, match_type) tuples sorted by
        score, match_type: 'ico', 'exact', 'fuzzy_name'
    """
    if threshold is None:
        threshold = settings.MERCHANT_SIMILARITY_THRESHOLD

    name_norm = normalize_text(company_name)
    ico = (ico or '').strip()

    queryset = Merchant.objects.all()
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)

    candidates = []
    seen = set()

    # Step 1: Same registration number
    if ico:
        for merchant in queryset.filter(ico=ico):
            candidates.append((merchant, 100, 'ico'))
            seen.add(merchant.id)

    # Step 2: Company name, exact after normalization or fuzzy
    if name_norm:
        for merchant in queryset.exclude(id__in=seen):
            if merchant.company_name_normalized == name_norm:
                candidates.append((merchant, 100, 'exact'))
                continue
            similarity = fuzz.ratio(name_norm, merchant.company_name_normalized)
            if similarity >= threshold:
                candidates.append((merchant, similarity, 'fuzzy_name'))

    candidates.sort(key=lambda c: c[1], reverse=True)
    return candidates
