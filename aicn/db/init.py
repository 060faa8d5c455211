"""Database initialization and schema management."""

import logging
from typing import Any, Dict, List

from psycopg.errors import DatabaseError

from ..models import Category
from .connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Categories table
CREATE TABLE IF NOT EXISTS categories (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    slug TEXT NOT NULL UNIQUE,
    description TEXT,
    icon TEXT
);

-- Sources table
CREATE TABLE IF NOT EXISTS sources (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    url TEXT,
    rss_feed TEXT,
    language TEXT NOT NULL DEFAULT 'en',
    active BOOLEAN NOT NULL DEFAULT TRUE,
    last_scraped TIMESTAMP
);

-- Tags table
CREATE TABLE IF NOT EXISTS tags (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);

-- Articles table
CREATE TABLE IF NOT EXISTS articles (
    id SERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    source TEXT,
    author TEXT,
    published_date DATE,
    scraped_date TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    content TEXT,
    summary TEXT,
    relevance_score REAL,
    difficulty_level TEXT CHECK (difficulty_level IN ('beginner', 'intermediate', 'advanced')),
    category_id INTEGER REFERENCES categories(id),
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'queued', 'review', 'approved', 'rejected')),
    language TEXT NOT NULL DEFAULT 'en',
    is_ai_generated BOOLEAN NOT NULL DEFAULT FALSE,
    view_count INTEGER NOT NULL DEFAULT 0,
    helpful_count INTEGER NOT NULL DEFAULT 0,
    not_helpful_count INTEGER NOT NULL DEFAULT 0
);

-- Article tags link table
CREATE TABLE IF NOT EXISTS article_tags (
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (article_id, tag_id)
);

-- Settings table (JSON-encoded values)
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value JSONB NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Operation history
CREATE TABLE IF NOT EXISTS operation_runs (
    id SERIAL PRIMARY KEY,
    operation TEXT NOT NULL,
    started_at TIMESTAMP NOT NULL,
    finished_at TIMESTAMP,
    status TEXT NOT NULL DEFAULT 'running'
        CHECK (status IN ('running', 'completed', 'cancelled', 'error')),
    stats_json JSONB
);

-- Weekly editorials, one per week
CREATE TABLE IF NOT EXISTS editorials (
    id SERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    week_start DATE NOT NULL UNIQUE,
    week_end DATE NOT NULL,
    status TEXT NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'published')),
    ai_generated_at TIMESTAMP,
    published_at TIMESTAMP,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_articles_category ON articles(category_id);
CREATE INDEX IF NOT EXISTS idx_articles_status ON articles(status);
CREATE INDEX IF NOT EXISTS idx_articles_published_date ON articles(published_date);
CREATE INDEX IF NOT EXISTS idx_articles_scraped_date ON articles(scraped_date);
CREATE INDEX IF NOT EXISTS idx_articles_relevance ON articles(relevance_score);
CREATE INDEX IF NOT EXISTS idx_sources_active ON sources(active);
CREATE INDEX IF NOT EXISTS idx_operation_runs_started_at ON operation_runs(started_at);
CREATE INDEX IF NOT EXISTS idx_editorials_status ON editorials(status);
"""


DEFAULT_CATEGORIES: List[Category] = [
    Category(
        name="Credit Scoring",
        slug="credit-scoring",
        description="AI and machine learning models for creditworthiness",
        icon="📊",
    ),
    Category(
        name="Fraud Detection",
        slug="fraud-detection",
        description="AI for detecting and preventing financial fraud",
        icon="🛡️",
    ),
    Category(
        name="Income & Employment",
        slug="income-employment",
        description="Income verification, cash flow and affordability analysis",
        icon="💼",
    ),
    Category(
        name="Regulatory & Compliance",
        slug="regulatory-compliance",
        description="AI governance, fair lending and model explainability",
        icon="⚖️",
    ),
    Category(
        name="Lending Automation",
        slug="lending-automation",
        description="Automated underwriting and digital lending",
        icon="🏦",
    ),
]


def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                result = cur.fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


def seed_categories(conn, categories: List[Category] = DEFAULT_CATEGORIES) -> int:
    """Insert missing default categories. Returns the number inserted."""
    inserted = 0
    with conn.cursor() as cur:
        for category in categories:
            cur.execute(
                """
                INSERT INTO categories (name, slug, description, icon)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (slug) DO NOTHING
                """,
                (category.name, category.slug, category.description, category.icon),
            )
            inserted += cur.rowcount
    conn.commit()
    return inserted


def init_database(config: Dict[str, Any], seed: bool = True) -> None:
    """Initialize database schema and seed default categories."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()
            logger.info("Database schema initialized")

            if seed:
                inserted = seed_categories(conn)
                logger.info("Seeded %d categories", inserted)
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
