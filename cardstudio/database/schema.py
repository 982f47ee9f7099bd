"""
Supabase (Postgres) migration for card designs.

Apply with the Supabase CLI or the SQL editor. The partial unique index
keeps at most one active design per business, and ``activate_card_design``
demotes and promotes inside one transaction so activation is a single
request from the API's point of view.
"""

SCHEMA = """
CREATE TABLE IF NOT EXISTS card_designs (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    business_id UUID NOT NULL REFERENCES businesses(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT FALSE,

    -- Pass Colors ('rgb(r, g, b)' or '#rrggbb')
    foreground_color TEXT DEFAULT 'rgb(255, 255, 255)',
    background_color TEXT DEFAULT 'rgb(139, 90, 43)',
    label_color TEXT DEFAULT 'rgb(255, 255, 255)',

    -- Text Fields
    organization_name TEXT NOT NULL,
    description TEXT NOT NULL,
    logo_text TEXT,

    -- Stamp Configuration
    total_stamps INTEGER DEFAULT 10 CHECK (total_stamps >= 2 AND total_stamps <= 20),
    stamp_filled_color TEXT DEFAULT 'rgb(255, 215, 0)',
    stamp_empty_color TEXT DEFAULT 'rgb(80, 50, 20)',
    stamp_border_color TEXT DEFAULT 'rgb(255, 255, 255)',
    stamp_icon TEXT DEFAULT 'checkmark',
    reward_icon TEXT DEFAULT 'gift',
    icon_color TEXT,  -- NULL: label color is used

    -- Uploaded assets (Supabase Storage URLs)
    logo_path TEXT,
    strip_background_path TEXT,

    -- Pass Fields (JSON arrays of {key, label, value})
    secondary_fields JSONB DEFAULT '[]'::jsonb
        CHECK (jsonb_array_length(secondary_fields) <= 3),
    auxiliary_fields JSONB DEFAULT '[]'::jsonb
        CHECK (jsonb_array_length(auxiliary_fields) <= 3),
    back_fields JSONB DEFAULT '[]'::jsonb
        CHECK (jsonb_array_length(back_fields) <= 10),

    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_card_designs_business ON card_designs(business_id);

CREATE UNIQUE INDEX IF NOT EXISTS idx_card_designs_one_active
    ON card_designs(business_id) WHERE is_active;

CREATE OR REPLACE FUNCTION activate_card_design(p_business_id UUID, p_design_id UUID)
RETURNS SETOF card_designs
LANGUAGE plpgsql
AS $$
BEGIN
    IF NOT EXISTS (
        SELECT 1 FROM card_designs WHERE id = p_design_id AND business_id = p_business_id
    ) THEN
        RAISE EXCEPTION 'design % not found for business %', p_design_id, p_business_id;
    END IF;

    UPDATE card_designs
       SET is_active = FALSE, updated_at = NOW()
     WHERE business_id = p_business_id AND is_active AND id <> p_design_id;

    RETURN QUERY
    UPDATE card_designs
       SET is_active = TRUE, updated_at = NOW()
     WHERE id = p_design_id
    RETURNING *;
END;
$$;
"""
