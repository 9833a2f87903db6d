#!/usr/bin/env python3
"""
Sample articles used when no news source is configured.

Publication times are relative to "now" (one to five days back) so the set
always falls inside the default seven day window.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..models.article import Article
from ..models.research_config import DateRange

SAMPLE_ARTICLES = [
    {
        'title': "Union Budget 2024: Infrastructure Push and Inclusive Growth Focus",
        'description': (
            "Finance Minister Nirmala Sitharaman's Budget 2024 emphasizes infrastructure development with record "
            "allocations for roads, railways, and digital connectivity. The budget also introduces measures for "
            "employment generation and social welfare."
        ),
        'content': (
            "The Union Budget 2024 presented by Finance Minister Nirmala Sitharaman focuses on infrastructure "
            "development, digital transformation, and inclusive growth. Key announcements include increased "
            "allocation for rural development, green energy initiatives, and digital public infrastructure. The "
            "budget allocates Rs 11.11 lakh crore for capital expenditure, the highest ever, with significant focus "
            "on roads, railways, and urban infrastructure. New employment-linked incentive schemes aim to create "
            "4.1 crore jobs over three years."
        ),
        'url': "https://pib.gov.in/PressReleasePage.aspx?PRID=1999999",
        'source': "Press Information Bureau",
        'days_ago': 2,
        'category': "Economy",
        'relevance_score': 95
    },
    {
        'title': "Supreme Court Strikes Down Electoral Bonds Scheme as Unconstitutional",
        'description': (
            "A five-judge Constitution Bench of the Supreme Court has unanimously declared the electoral bonds "
            "scheme unconstitutional, ruling that it violated the right to information of citizens regarding "
            "political funding."
        ),
        'content': (
            "In a landmark judgment, the Supreme Court has declared the electoral bond scheme unconstitutional, "
            "citing concerns over transparency in political funding. The court directed the government to disclose "
            "all electoral bond details within three months. The scheme, introduced in 2018, allowed anonymous "
            "political donations through bonds purchased from authorized banks. The court held that this violated "
            "the citizens' right to know under Article 19(1)(a) of the Constitution."
        ),
        'url': "https://indianexpress.com/article/india/electoral-bonds-supreme-court-verdict-9999999/",
        'source': "The Indian Express",
        'days_ago': 1,
        'category': "Politics",
        'relevance_score': 98
    },
    {
        'title': "ISRO's Chandrayaan-3 Extends Mission Life with New Discoveries",
        'description': (
            "Chandrayaan-3 mission has been extended beyond its planned duration, with the Pragyan rover "
            "discovering evidence of ancient volcanic activity and water molecules on the lunar surface."
        ),
        'content': (
            "ISRO's Chandrayaan-3 mission continues to provide valuable data about the lunar surface. The mission "
            "has successfully completed its primary objectives and is now in extended operations phase. The Pragyan "
            "rover has traversed over 100 meters and discovered evidence of ancient volcanic activity. Spectroscopic "
            "analysis indicates the presence of hydroxyl and water molecules, supporting theories of water presence "
            "in lunar polar regions. This extends India's capabilities in lunar exploration and contributes to "
            "global space research."
        ),
        'url': "https://www.thehindu.com/sci-tech/science/chandrayaan-3-extends-mission-life/article9999999999999.ece",
        'source': "The Hindu",
        'days_ago': 3,
        'category': "Science & Technology",
        'relevance_score': 88
    },
    {
        'title': "India's Updated Nationally Determined Contributions for COP28",
        'description': (
            "India has submitted its updated Nationally Determined Contributions (NDCs) to UNFCCC, committing to "
            "reduce emission intensity by 45% from 2005 levels by 2030 and achieve net-zero emissions by 2070."
        ),
        'content': (
            "India has pledged to achieve net-zero emissions by 2070 during the recent climate negotiations. The "
            "government outlined plans for renewable energy expansion, with 500 GW target by 2030, and sustainable "
            "development initiatives. The updated NDCs include enhanced commitments for renewable energy "
            "deployment, electric vehicle adoption, and forest conservation. India also emphasized the principles "
            "of equity and common but differentiated responsibilities in global climate action."
        ),
        'url': "https://newsapi.org/article/india-climate-commitments-9999999",
        'source': "NewsAPI",
        'days_ago': 4,
        'category': "Environment",
        'relevance_score': 92
    },
    {
        'title': "Government Announces Comprehensive Agriculture Technology Mission",
        'description': (
            "Union Ministry of Agriculture launches Rs. 2,500 crore mission for agricultural technology adoption, "
            "focusing on precision farming, drone technology, and AI-driven crop management."
        ),
        'content': (
            "The government has announced new measures to strengthen agricultural technology adoption through a "
            "comprehensive mission. The Rs. 2,500 crore initiative focuses on precision farming techniques, drone "
            "technology for crop monitoring, and AI-driven decision support systems. Key components include soil "
            "health card expansion, crop residue management, and promotion of natural farming practices. The "
            "mission aims to improve farmer incomes through technology-driven productivity enhancement and "
            "sustainable agricultural practices."
        ),
        'url': "https://pib.gov.in/PressReleasePage.aspx?PRID=2000000",
        'source': "Press Information Bureau",
        'days_ago': 5,
        'category': "Agriculture",
        'relevance_score': 82
    }
]


def get_sample_articles(date_range: DateRange, now: Optional[datetime] = None) -> List[Article]:
    """Sample articles published inside date_range."""
    now = now or datetime.now(timezone.utc)
    articles = []
    for item in SAMPLE_ARTICLES:
        article = Article(
            title=item['title'],
            description=item['description'],
            content=item['content'],
            url=item['url'],
            source=item['source'],
            published_at=now - timedelta(days=item['days_ago']),
            category=item['category'],
            relevance_score=item['relevance_score']
        )
        if date_range.contains(article.published_at):
            articles.append(article)
    return articles
