"""DDL for the tables the orchestrator reads and writes."""

from __future__ import annotations

from psycopg_pool import ConnectionPool

DDL = """
CREATE TABLE IF NOT EXISTS content_items (
    id UUID PRIMARY KEY,
    owner_id UUID NOT NULL,
    main_keyword TEXT NOT NULL,
    secondary_keywords TEXT[] NOT NULL DEFAULT '{}',
    target_word_count INTEGER NOT NULL DEFAULT 1000,
    tone TEXT NOT NULL DEFAULT 'professional',
    target_country TEXT NOT NULL DEFAULT 'Global',
    h2_list TEXT[] NOT NULL DEFAULT '{}',
    h3_list TEXT[] NOT NULL DEFAULT '{}',
    custom_details TEXT,
    internal_links TEXT[] NOT NULL DEFAULT '{}',
    generated_title TEXT,
    meta_description TEXT,
    generated_content TEXT NOT NULL DEFAULT '',
    featured_image_url TEXT,
    status TEXT NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'generating', 'completed', 'failed', 'published')),
    total_sections INTEGER NOT NULL DEFAULT 0 CHECK (total_sections >= 0),
    sections_completed INTEGER NOT NULL DEFAULT 0 CHECK (sections_completed >= 0),
    current_section_label TEXT,
    error_message TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_content_items_owner_id
    ON content_items(owner_id);

CREATE TABLE IF NOT EXISTS credit_accounts (
    user_id UUID PRIMARY KEY,
    total_credits INTEGER NOT NULL DEFAULT 0 CHECK (total_credits >= 0),
    used_credits INTEGER NOT NULL DEFAULT 0 CHECK (used_credits >= 0),
    locked_credits INTEGER NOT NULL DEFAULT 0 CHECK (locked_credits >= 0),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CHECK (used_credits + locked_credits <= total_credits)
);

CREATE TABLE IF NOT EXISTS credit_transactions (
    id UUID PRIMARY KEY,
    user_id UUID NOT NULL REFERENCES credit_accounts(user_id) ON DELETE CASCADE,
    content_id UUID,
    type TEXT NOT NULL CHECK (type IN ('usage', 'refund', 'manual_adjustment', 'reset')),
    amount INTEGER NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('locked', 'completed', 'refunded')),
    note TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_credit_transactions_user_id
    ON credit_transactions(user_id, created_at);

-- At most one open reservation per (user, content item).
CREATE UNIQUE INDEX IF NOT EXISTS idx_credit_transactions_open_lock
    ON credit_transactions(user_id, content_id)
    WHERE type = 'usage' AND status = 'locked';
"""


def initialise_schema(pool: ConnectionPool) -> None:
    """Create the content and credit tables when they are missing."""

    with pool.connection() as conn, conn.cursor() as cur:
        cur.execute(DDL)
        conn.commit()
