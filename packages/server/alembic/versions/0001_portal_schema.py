"""Portal schema: tenants, profiles, trials, trial content, shared tables, helper functions, RLS.

Revision ID: 0001_portal_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_portal_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Tenant-scoped tables; each carries organization_id.
RLS_TABLES = [
    "clinical_trials",
    "user_clinical_assignments",
    "enrollments",
    "news_updates",
    "training_materials",
    "study_protocols",
    "files",
]

# Tables whose updated_at is maintained by trigger.
TIMESTAMPED_TABLES = [
    "organizations",
    "profiles",
    "clinical_trials",
    "enrollments",
    "news_updates",
    "training_materials",
    "study_protocols",
    "hospitals",
    "news",
    "pdf_documents",
    "clients",
    "user_analytics",
    "app_settings",
]


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _trial_scope() -> list[sa.Column]:
    return [
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "clinical_trial_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clinical_trials.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
    ]


def _trial_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_organization_id", table, ["organization_id"])
    op.create_index(f"ix_{table}_clinical_trial_id", table, ["clinical_trial_id"])


# ---------------------------------------------------------------------------
# SQL functions
# ---------------------------------------------------------------------------

UPDATE_UPDATED_AT = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS trigger AS $$
BEGIN
    NEW.updated_at = now();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

CURRENT_USER_ID = """
CREATE OR REPLACE FUNCTION portal_current_user_id()
RETURNS uuid AS $$
    SELECT NULLIF(current_setting('request.jwt.claims', true)::json->>'sub', '')::uuid;
$$ LANGUAGE sql STABLE;
"""

CURRENT_ORG_ID = """
CREATE OR REPLACE FUNCTION portal_current_org_id()
RETURNS uuid AS $$
    SELECT organization_id FROM profiles WHERE id = portal_current_user_id();
$$ LANGUAGE sql STABLE SECURITY DEFINER;
"""

CURRENT_IS_ADMIN = """
CREATE OR REPLACE FUNCTION portal_current_is_admin()
RETURNS boolean AS $$
    SELECT coalesce((SELECT role = 'admin' FROM profiles WHERE id = portal_current_user_id()), false);
$$ LANGUAGE sql STABLE SECURITY DEFINER;
"""

GET_USER_ACCESSIBLE_TRIALS = """
CREATE OR REPLACE FUNCTION get_user_accessible_trials(user_id uuid)
RETURNS TABLE (id uuid, name text) AS $$
    SELECT t.id, t.name
    FROM clinical_trials t
    JOIN profiles p
      ON p.id = get_user_accessible_trials.user_id
     AND p.organization_id = t.organization_id
    WHERE p.role = 'admin'
       OR EXISTS (
            SELECT 1 FROM user_clinical_assignments a
            WHERE a.user_id = p.id
              AND a.clinical_trial_id = t.id
              AND a.organization_id = p.organization_id
       );
$$ LANGUAGE sql STABLE SECURITY DEFINER;
"""

CREATE_PROFILE_AND_ASSIGNMENTS = """
CREATE OR REPLACE FUNCTION create_profile_and_assignments(
    admin_user_id uuid,
    new_user_auth_id uuid,
    new_user_role text,
    new_user_display_name text DEFAULT NULL,
    selected_clinical_trial_id uuid DEFAULT NULL
)
RETURNS json AS $$
DECLARE
    admin_org uuid;
    new_profile_id uuid;
BEGIN
    SELECT organization_id INTO admin_org
    FROM profiles WHERE id = admin_user_id AND role = 'admin';
    IF admin_org IS NULL THEN
        RETURN json_build_object('success', false, 'error', 'Only admins can create users');
    END IF;

    IF EXISTS (SELECT 1 FROM profiles WHERE id = new_user_auth_id) THEN
        RETURN json_build_object('success', false, 'error', 'User profile already exists');
    END IF;

    IF selected_clinical_trial_id IS NOT NULL AND NOT EXISTS (
        SELECT 1 FROM clinical_trials
        WHERE id = selected_clinical_trial_id AND organization_id = admin_org
    ) THEN
        RETURN json_build_object('success', false, 'error', 'Clinical trial not found in your organization');
    END IF;

    INSERT INTO profiles (id, organization_id, role, display_name)
    VALUES (new_user_auth_id, admin_org, new_user_role, new_user_display_name)
    RETURNING id INTO new_profile_id;

    IF selected_clinical_trial_id IS NOT NULL THEN
        INSERT INTO user_clinical_assignments (user_id, clinical_trial_id, organization_id)
        VALUES (new_user_auth_id, selected_clinical_trial_id, admin_org);
    END IF;

    RETURN json_build_object(
        'success', true,
        'profile_id', new_profile_id,
        'trial_assigned', selected_clinical_trial_id IS NOT NULL
    );
END;
$$ LANGUAGE plpgsql SECURITY DEFINER;
"""

GET_ORGANIZATION_STATS = """
CREATE OR REPLACE FUNCTION get_organization_stats(org_id uuid)
RETURNS json AS $$
    SELECT json_build_object(
        'totalUsers', (SELECT count(*) FROM profiles WHERE organization_id = org_id),
        'totalTrials', (SELECT count(*) FROM clinical_trials WHERE organization_id = org_id),
        'activeTrials', (SELECT count(*) FROM clinical_trials WHERE organization_id = org_id AND is_active),
        'totalEnrollments', (SELECT count(*) FROM enrollments WHERE organization_id = org_id),
        'totalNewsUpdates', (SELECT count(*) FROM news_updates WHERE organization_id = org_id),
        'totalTrainingMaterials', (SELECT count(*) FROM training_materials WHERE organization_id = org_id),
        'totalStudyProtocols', (SELECT count(*) FROM study_protocols WHERE organization_id = org_id)
    );
$$ LANGUAGE sql STABLE SECURITY DEFINER;
"""

FUNCTIONS = [
    "get_organization_stats(uuid)",
    "create_profile_and_assignments(uuid, uuid, text, text, uuid)",
    "get_user_accessible_trials(uuid)",
    "portal_current_is_admin()",
    "portal_current_org_id()",
    "portal_current_user_id()",
    "update_updated_at_column()",
]

# Managed deployments keep identity accounts in auth.users.
LINK_PROFILES_TO_AUTH = """
DO $$
BEGIN
    IF EXISTS (
        SELECT 1 FROM information_schema.tables
        WHERE table_schema = 'auth' AND table_name = 'users'
    ) THEN
        ALTER TABLE profiles
            ADD CONSTRAINT profiles_id_auth_users_fkey
            FOREIGN KEY (id) REFERENCES auth.users (id) ON DELETE CASCADE;
    END IF;
END
$$;
"""


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # -----------------------------------------------------------------------
    # Tenants and profiles
    # -----------------------------------------------------------------------

    op.create_table(
        "organizations",
        _id_column(),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.Text(), nullable=False, server_default="user"),
        sa.Column("display_name", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'user', 'doctor')", name="ck_profiles_role"),
    )
    op.create_index("ix_profiles_organization_id", "profiles", ["organization_id"])
    op.execute(LINK_PROFILES_TO_AUTH)

    # -----------------------------------------------------------------------
    # Trials and assignments
    # -----------------------------------------------------------------------

    op.create_table(
        "clinical_trials",
        _id_column(),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_clinical_trials_organization_id", "clinical_trials", ["organization_id"])

    op.create_table(
        "user_clinical_assignments",
        _id_column(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "clinical_trial_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clinical_trials.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_id", "clinical_trial_id", name="uq_assignment_user_trial"),
    )
    op.create_index("ix_user_clinical_assignments_user_id", "user_clinical_assignments", ["user_id"])
    _trial_indexes("user_clinical_assignments")

    # -----------------------------------------------------------------------
    # Trial content
    # -----------------------------------------------------------------------

    op.create_table(
        "enrollments",
        _id_column(),
        *_trial_scope(),
        sa.Column("participant_name", sa.Text(), nullable=False),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("storage_path", sa.Text(), nullable=True),
        *_timestamps(),
    )
    _trial_indexes("enrollments")

    op.create_table(
        "news_updates",
        _id_column(),
        *_trial_scope(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=True),
        *_timestamps(),
    )
    _trial_indexes("news_updates")
    op.create_index("ix_news_updates_published_at", "news_updates", ["published_at"])

    op.create_table(
        "training_materials",
        _id_column(),
        *_trial_scope(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("storage_path", sa.Text(), nullable=True),
        *_timestamps(),
    )
    _trial_indexes("training_materials")

    op.create_table(
        "study_protocols",
        _id_column(),
        *_trial_scope(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("version", sa.Text(), nullable=True),
        sa.Column("storage_path", sa.Text(), nullable=True),
        *_timestamps(),
    )
    _trial_indexes("study_protocols")

    op.create_table(
        "files",
        _id_column(),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "clinical_trial_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clinical_trials.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("bucket", sa.Text(), nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column(
            "uploaded_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("mime_type", sa.Text(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_files_organization_id", "files", ["organization_id"])
    op.create_index("ix_files_clinical_trial_id", "files", ["clinical_trial_id"])

    # -----------------------------------------------------------------------
    # Shared tables
    # -----------------------------------------------------------------------

    op.create_table(
        "hospitals",
        _id_column(),
        sa.Column("hospital_name", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("principal_investigator", sa.Text(), nullable=False),
        sa.Column("consented_patients", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("randomized_patients", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("consented_rate", sa.Numeric(5, 2), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "news",
        _id_column(),
        sa.Column("news_title", sa.Text(), nullable=False),
        sa.Column("news_content", sa.Text(), nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_by_name", sa.Text(), nullable=True),
        sa.Column("created_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_news_created_date", "news", ["created_date"])

    op.create_table(
        "pdf_documents",
        _id_column(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=True),
        sa.Column("file_name", sa.Text(), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("uploaded_by_name", sa.Text(), nullable=True),
        sa.Column("upload_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "clients",
        _id_column(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="active"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive', 'pending')", name="ck_clients_status"),
    )

    op.create_table(
        "user_analytics",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("user_name", sa.Text(), nullable=True),
        sa.Column("user_email", sa.Text(), nullable=True),
        sa.Column("site", sa.Text(), nullable=True),
        sa.Column("total_app_opens", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_app_open", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tab_views", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("most_viewed_tab", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "app_settings",
        _id_column(),
        sa.Column("setting_key", sa.Text(), nullable=False, unique=True),
        sa.Column("setting_value", sa.Text(), nullable=True),
        sa.Column("setting_type", sa.Text(), nullable=False, server_default="string"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "setting_type IN ('string', 'boolean', 'number', 'json')",
            name="ck_app_settings_type",
        ),
    )

    # -----------------------------------------------------------------------
    # Triggers and functions
    # -----------------------------------------------------------------------

    op.execute(UPDATE_UPDATED_AT)
    for table in TIMESTAMPED_TABLES:
        op.execute(
            f"CREATE TRIGGER update_{table}_updated_at BEFORE UPDATE ON {table} "
            f"FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )

    op.execute(CURRENT_USER_ID)
    op.execute(CURRENT_ORG_ID)
    op.execute(CURRENT_IS_ADMIN)
    op.execute(GET_USER_ACCESSIBLE_TRIALS)
    op.execute(CREATE_PROFILE_AND_ASSIGNMENTS)
    op.execute(GET_ORGANIZATION_STATS)

    # -----------------------------------------------------------------------
    # Row-level security
    # -----------------------------------------------------------------------

    # The API's own connection owns the tables and is not subject to these
    # policies; they govern direct access from authenticated client roles.
    for table in RLS_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(
            f"CREATE POLICY {table}_org_isolation ON {table} "
            f"USING (organization_id = portal_current_org_id())"
        )

    op.execute("ALTER TABLE organizations ENABLE ROW LEVEL SECURITY")
    op.execute(
        "CREATE POLICY organizations_member_read ON organizations FOR SELECT "
        "USING (id = portal_current_org_id())"
    )

    op.execute("ALTER TABLE profiles ENABLE ROW LEVEL SECURITY")
    op.execute(
        "CREATE POLICY profiles_org_read ON profiles FOR SELECT "
        "USING (organization_id = portal_current_org_id())"
    )
    op.execute(
        "CREATE POLICY profiles_self_or_admin_write ON profiles FOR UPDATE "
        "USING (id = portal_current_user_id() "
        "OR (portal_current_is_admin() AND organization_id = portal_current_org_id()))"
    )


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS profiles_self_or_admin_write ON profiles")
    op.execute("DROP POLICY IF EXISTS profiles_org_read ON profiles")
    op.execute("DROP POLICY IF EXISTS organizations_member_read ON organizations")
    for table in reversed(RLS_TABLES):
        op.execute(f"DROP POLICY IF EXISTS {table}_org_isolation ON {table}")

    for table in reversed(TIMESTAMPED_TABLES):
        op.execute(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")
    for signature in FUNCTIONS:
        op.execute(f"DROP FUNCTION IF EXISTS {signature}")

    op.drop_table("app_settings")
    op.drop_table("user_analytics")
    op.drop_table("clients")
    op.drop_table("pdf_documents")
    op.drop_table("news")
    op.drop_table("hospitals")
    op.drop_table("files")
    op.drop_table("study_protocols")
    op.drop_table("training_materials")
    op.drop_table("news_updates")
    op.drop_table("enrollments")
    op.drop_table("user_clinical_assignments")
    op.drop_table("clinical_trials")
    op.drop_table("profiles")
    op.drop_table("organizations")
