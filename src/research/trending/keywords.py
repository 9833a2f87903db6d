#!/usr/bin/env python3
"""
UPSC keyword list and rule-based topic classification.
"""

from typing import List, Tuple

UPSC_KEYWORDS = [
    # Politics & Governance
    'parliament', 'election', 'government', 'minister', 'policy', 'bill', 'amendment',
    'constitution', 'supreme court', 'high court', 'judiciary', 'president', 'prime minister',
    'governor', 'chief minister', 'lok sabha', 'rajya sabha', 'niti aayog',

    # Economy
    'economy', 'gdp', 'inflation', 'budget', 'tax', 'gst', 'finance minister',
    'reserve bank', 'monetary policy', 'fiscal policy', 'economic survey',
    'foreign investment', 'trade', 'export', 'import',

    # International Relations
    'china', 'pakistan', 'united states', 'america', 'russia', 'european union',
    'nato', 'brics', 'saarc', 'asean', 'foreign policy', 'diplomacy',
    'international relations', 'bilateral', 'multilateral',

    # Science & Technology
    'artificial intelligence', 'machine learning', 'space', 'isro', 'satellite',
    'nuclear', 'renewable energy', 'solar', 'wind', 'electric vehicle',
    '5g', 'internet', 'cyber security', 'biotechnology',

    # Environment
    'climate change', 'global warming', 'pollution', 'environment', 'forest',
    'wildlife', 'conservation', 'sustainable development', 'paris agreement',
    'cop', 'biodiversity', 'carbon emission',

    # Society
    'education', 'healthcare', 'poverty', 'inequality', 'women empowerment',
    'social justice', 'reservation', 'caste', 'religion', 'minority rights',
    'rural development', 'urban development'
]

# First matching rule wins
CATEGORY_RULES: List[Tuple[str, List[str]]] = [
    ('Politics', ['parliament', 'election', 'government', 'policy', 'constitution', 'judiciary']),
    ('Economy', ['economy', 'gdp', 'budget', 'tax', 'trade', 'finance']),
    ('International Relations', ['china', 'pakistan', 'foreign policy', 'diplomacy', 'international']),
    ('Science & Technology', ['artificial intelligence', 'space', 'nuclear', 'technology', 'satellite']),
    ('Environment', ['climate', 'environment', 'pollution', 'forest', 'biodiversity']),
    ('Society', ['education', 'healthcare', 'poverty', 'women', 'social']),
    ('Governance', ['governance', 'administration', 'public policy']),
    ('Defense', ['defense', 'military', 'security']),
]

GS_PAPER_MAPPING = {
    'Politics': ['GS-II'],
    'Economy': ['GS-III'],
    'International Relations': ['GS-II'],
    'Science & Technology': ['GS-III'],
    'Environment': ['GS-III'],
    'Society': ['GS-I', 'GS-II'],
    'Governance': ['GS-II'],
    'Defense': ['GS-II', 'GS-III'],
    'Other': ['GS-II']
}


def extract_topics_from_text(text: str, keywords: List[str] = UPSC_KEYWORDS) -> List[str]:
    """
    Extract candidate topic phrases from lower-cased text.

    For each keyword present, the phrase is the word before through the word
    after its first occurrence. Phrases of three characters or fewer are
    dropped; duplicates are removed preserving first-seen order.
    """
    words = text.split()
    topics: List[str] = []

    for keyword in keywords:
        if keyword not in text:
            continue

        span = len(keyword.split())
        index = next(
            (i for i in range(len(words)) if keyword in ' '.join(words[i:i + span])),
            None
        )
        if index is None:
            continue

        phrase = ' '.join(words[max(0, index - 1):min(len(words), index + span + 1)])
        if len(phrase) > 3 and phrase not in topics:
            topics.append(phrase)

    return topics


def categorize_topic(topic: str) -> str:
    topic_lower = topic.lower()
    for category, terms in CATEGORY_RULES:
        if any(term in topic_lower for term in terms):
            return category
    return 'Other'


def map_to_gs_papers(category: str) -> List[str]:
    return list(GS_PAPER_MAPPING.get(category, ['GS-II']))
