"""
列表接口的降级数据

存储不可用时，只读列表接口返回这里的固定数据（状态码仍为 200）。
每次调用返回新的副本，调用方可以随意修改。
"""

import copy

from .models import EntityKind

_SAMPLE_TOPICS = [
    {
        "id": "topic1",
        "name": "Machine Learning",
        "description": "Statistical techniques enabling computers to improve based on experience",
        "keywords": ["algorithms", "neural networks", "deep learning"],
        "articles_ids": [],
        "categories_ids": ["cat1"],
        "related_topics_ids": ["topic2"],
        "unread_count": 3,
    },
    {
        "id": "topic2",
        "name": "Natural Language Processing",
        "description": "Processing and analyzing human language with AI",
        "keywords": ["NLP", "text analysis", "language models"],
        "articles_ids": [],
        "categories_ids": ["cat1"],
        "related_topics_ids": ["topic1"],
        "unread_count": 2,
    },
    {
        "id": "topic3",
        "name": "Data Privacy",
        "description": "Protecting personal and sensitive information",
        "keywords": ["privacy", "data protection", "GDPR"],
        "articles_ids": [],
        "categories_ids": ["cat1"],
        "related_topics_ids": ["topic8"],
        "unread_count": 4,
    },
    {
        "id": "topic4",
        "name": "Cloud Computing",
        "description": "On-demand availability of computer system resources",
        "keywords": ["cloud", "SaaS", "distributed computing"],
        "articles_ids": [],
        "categories_ids": ["cat1"],
        "related_topics_ids": [],
        "unread_count": 1,
    },
    {
        "id": "topic5",
        "name": "Stock Market",
        "description": "News and analysis about equity markets",
        "keywords": ["stocks", "equities", "trading"],
        "articles_ids": [],
        "categories_ids": ["cat2"],
        "related_topics_ids": ["topic9"],
        "unread_count": 2,
    },
    {
        "id": "topic6",
        "name": "Startups",
        "description": "Emerging companies and entrepreneurship",
        "keywords": ["entrepreneurship", "venture capital", "innovation"],
        "articles_ids": [],
        "categories_ids": ["cat2"],
        "related_topics_ids": [],
        "unread_count": 3,
    },
    {
        "id": "topic8",
        "name": "Diplomacy",
        "description": "International dialogue and negotiation between nations",
        "keywords": ["international relations", "treaties", "negotiations"],
        "articles_ids": [],
        "categories_ids": ["cat3"],
        "related_topics_ids": ["topic9", "topic3"],
        "unread_count": 3,
    },
    {
        "id": "topic9",
        "name": "Trade Agreements",
        "description": "International trade policies and economic partnerships",
        "keywords": ["trade", "tariffs", "economic cooperation"],
        "articles_ids": [],
        "categories_ids": ["cat3"],
        "related_topics_ids": ["topic5", "topic8"],
        "unread_count": 3,
    },
]

_SAMPLE_CATEGORIES = [
    {
        "id": "cat1",
        "name": "Technology",
        "description": "News and developments in the technology sector",
        "keywords": ["tech", "digital", "innovation"],
        "image_urls": [],
        "topics_ids": ["topic3", "topic4"],
        "unread_count": 12,
        "priority": 2,
        "subcategories": [
            {
                "id": "subcat1",
                "name": "Artificial Intelligence",
                "description": "Machine learning, neural networks, and AI research",
                "keywords": ["AI", "ML", "deep learning"],
                "unread_count": 5,
                "topics_ids": ["topic1", "topic2"],
            },
            {
                "id": "subcat2",
                "name": "Cybersecurity",
                "description": "Digital security, threats, and protective measures",
                "keywords": ["security", "hacking", "privacy"],
                "unread_count": 7,
                "topics_ids": ["topic3"],
            },
        ],
    },
    {
        "id": "cat2",
        "name": "Business",
        "description": "Corporate news, markets, and economic developments",
        "keywords": ["finance", "economy", "markets"],
        "image_urls": [],
        "topics_ids": ["topic5", "topic6"],
        "unread_count": 8,
        "priority": 1,
        "subcategories": [
            {
                "id": "subcat3",
                "name": "Finance",
                "description": "Banking, investments, and financial markets",
                "keywords": ["investing", "markets", "banking"],
                "unread_count": 3,
                "topics_ids": ["topic5"],
            },
        ],
    },
    {
        "id": "cat3",
        "name": "Politics",
        "description": "Government affairs, policy, and political developments",
        "keywords": ["government", "policy", "elections"],
        "image_urls": [],
        "topics_ids": ["topic8", "topic9"],
        "unread_count": 15,
        "priority": 3,
        "subcategories": [
            {
                "id": "subcat4",
                "name": "International Relations",
                "description": "Diplomacy, global affairs, and international cooperation",
                "keywords": ["diplomacy", "foreign policy", "international"],
                "unread_count": 6,
                "topics_ids": ["topic8", "topic9"],
            },
        ],
    },
]

_SAMPLE_EVENTS = [
    {
        "id": "event1",
        "date": "2024-03-13T00:00:00Z",
        "description": "EU Parliament approves the Artificial Intelligence Act",
        "image_urls": [],
        "related_events_ids": ["event2"],
        "articles_ids": [],
        "timeline": {"events": []},
        "unread_count": 2,
        "priority": 3,
    },
    {
        "id": "event2",
        "date": "2023-11-01T00:00:00Z",
        "description": "International AI Safety Summit held at Bletchley Park",
        "image_urls": [],
        "related_events_ids": ["event1"],
        "articles_ids": [],
        "timeline": {"events": []},
        "unread_count": 1,
        "priority": 2,
    },
]

_SAMPLE_NOTES = [
    {
        "id": "note1",
        "content": "Follow up on how the AI Act affects open-source model releases.",
        "created_at": "2024-03-14T09:00:00Z",
        "updated_at": "2024-03-14T09:00:00Z",
        "reference_type": "event",
        "reference_id": "event1",
        "tags": ["regulation"],
        "metadata": {},
        "priority": 2,
        "is_archived": False,
    },
    {
        "id": "note2",
        "content": "Compare privacy coverage across publishers.",
        "created_at": "2024-03-10T15:30:00Z",
        "updated_at": "2024-03-10T15:30:00Z",
        "reference_type": "topic",
        "reference_id": "topic3",
        "tags": ["privacy"],
        "metadata": {},
        "priority": 1,
        "is_archived": False,
    },
]

_SAMPLES = {
    EntityKind.TOPICS: _SAMPLE_TOPICS,
    EntityKind.CATEGORIES: _SAMPLE_CATEGORIES,
    EntityKind.EVENTS: _SAMPLE_EVENTS,
    EntityKind.NOTES: _SAMPLE_NOTES,
}


def get_fallback_entities(kind: EntityKind) -> list[dict]:
    """返回指定种类的降级数据副本"""
    return copy.deepcopy(_SAMPLES[kind])
