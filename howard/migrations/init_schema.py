"""Database schema initialization.

CREATE TABLE / CREATE INDEX statements for a local Howard database. The
hosted database carries the same tables; this mirrors them for development
and integration tests.

Called by database.init_db() when INIT_DB_SCHEMA=true.
"""


def create_schema(conn, cursor):
    """Create all tables and indexes.

    Args:
        conn: Database connection (for commit/rollback)
        cursor: Database cursor from get_cursor(conn)
    """
    cursor.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    # ── Tenancy ──
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS organizations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL,
            slug TEXT NOT NULL UNIQUE,
            logo_url TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            email TEXT NOT NULL,
            full_name TEXT,
            role TEXT NOT NULL DEFAULT 'client_no_access'
                CHECK (role IN ('admin', 'manager', 'user', 'client', 'client_no_access')),
            org_id UUID REFERENCES organizations(id) ON DELETE SET NULL,
            avatar_url TEXT,
            phone TEXT,
            is_active BOOLEAN DEFAULT FALSE,
            is_onboarded BOOLEAN DEFAULT FALSE,
            dashboard_iframe_url TEXT,
            allowed_org_ids UUID[] DEFAULT '{}',
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE UNIQUE INDEX IF NOT EXISTS idx_profiles_email ON profiles (LOWER(email))')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_profiles_org ON profiles (org_id)')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS user_organizations (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            is_primary BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            UNIQUE (user_id, org_id)
        )
    ''')

    # ── Tasks ──
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            description TEXT,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'in_progress', 'completed', 'hidden', 'cancelled')),
            priority TEXT NOT NULL DEFAULT 'medium'
                CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
            assigned_to UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            due_date TIMESTAMPTZ,
            completed_at TIMESTAMPTZ,
            is_internal BOOLEAN DEFAULT FALSE,
            is_recurring BOOLEAN DEFAULT FALSE,
            recurrence_rule JSONB,
            parent_task_id UUID REFERENCES tasks(id) ON DELETE SET NULL,
            next_occurrence_at TIMESTAMPTZ,
            metadata JSONB DEFAULT '{}',
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_tasks_org ON tasks (org_id)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_tasks_assigned ON tasks (assigned_to)')
    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_tasks_next_occurrence
        ON tasks (next_occurrence_at) WHERE is_recurring
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS task_comments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            task_id UUID NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
            user_id UUID REFERENCES profiles(id) ON DELETE SET NULL,
            content TEXT NOT NULL,
            mentions UUID[] DEFAULT '{}',
            is_internal BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_task_comments_task ON task_comments (task_id)')

    # ── Notifications / audit ──
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS notifications (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID REFERENCES organizations(id) ON DELETE CASCADE,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            type TEXT NOT NULL DEFAULT 'info',
            title TEXT NOT NULL,
            message TEXT,
            action_url TEXT,
            related_resource_type TEXT,
            related_resource_id UUID,
            is_read BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications (user_id, is_read)')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS notification_preferences (
            user_id UUID PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
            task_assigned BOOLEAN DEFAULT TRUE,
            task_status_changed BOOLEAN DEFAULT TRUE,
            task_comment_added BOOLEAN DEFAULT TRUE,
            task_mentioned BOOLEAN DEFAULT TRUE,
            file_uploaded BOOLEAN DEFAULT TRUE,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS activity_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID REFERENCES organizations(id) ON DELETE SET NULL,
            user_id UUID REFERENCES profiles(id) ON DELETE SET NULL,
            action TEXT NOT NULL,
            resource_type TEXT,
            resource_id UUID,
            details JSONB DEFAULT '{}',
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_activity_resource
        ON activity_logs (resource_type, resource_id)
    ''')

    # ── Workstreams ──
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS workstream_verticals (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL UNIQUE,
            description TEXT,
            display_order INTEGER DEFAULT 0,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS workstream_templates (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            vertical_id UUID NOT NULL REFERENCES workstream_verticals(id),
            name TEXT NOT NULL,
            description TEXT,
            associated_software TEXT,
            timing TEXT CHECK (timing IN ('daily', 'weekly', 'monthly', 'quarterly', 'annual', 'ad-hoc')),
            default_sop JSONB,
            display_order INTEGER DEFAULT 0,
            is_active BOOLEAN DEFAULT TRUE,
            created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS client_workstreams (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            name TEXT NOT NULL DEFAULT 'Workstream',
            notes TEXT,
            is_active BOOLEAN DEFAULT TRUE,
            created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_client_workstreams_org ON client_workstreams (org_id)')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS workstream_entries (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            workstream_id UUID NOT NULL REFERENCES client_workstreams(id) ON DELETE CASCADE,
            vertical_id UUID NOT NULL REFERENCES workstream_verticals(id),
            template_id UUID REFERENCES workstream_templates(id) ON DELETE SET NULL,
            name TEXT NOT NULL,
            description TEXT,
            associated_software TEXT,
            timing TEXT CHECK (timing IN ('daily', 'weekly', 'monthly', 'quarterly', 'annual', 'ad-hoc')),
            point_person_id UUID REFERENCES profiles(id) ON DELETE SET NULL,
            status TEXT NOT NULL DEFAULT 'yellow' CHECK (status IN ('red', 'yellow', 'green')),
            notes TEXT,
            custom_sop JSONB,
            display_order INTEGER DEFAULT 0,
            is_active BOOLEAN DEFAULT TRUE,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('''
        CREATE INDEX IF NOT EXISTS idx_workstream_entries_ws
        ON workstream_entries (workstream_id, display_order)
    ''')

    # ── Files ──
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS file_channels (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            client_org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            description TEXT,
            created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW(),
            UNIQUE (org_id, client_org_id)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS channel_folders (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            channel_id UUID NOT NULL REFERENCES file_channels(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            parent_path TEXT NOT NULL DEFAULT '/',
            created_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            UNIQUE (channel_id, parent_path, name)
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS files (
            id UUID PRIMARY KEY,
            org_id UUID NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
            channel_id UUID REFERENCES file_channels(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            size BIGINT NOT NULL,
            mime_type TEXT,
            storage_path TEXT NOT NULL UNIQUE,
            folder_path TEXT NOT NULL DEFAULT '/',
            uploaded_by UUID REFERENCES profiles(id) ON DELETE SET NULL,
            description TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    ''')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_files_org_folder ON files (org_id, folder_path)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_files_channel ON files (channel_id, folder_path)')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS file_permissions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            file_id UUID NOT NULL REFERENCES files(id) ON DELETE CASCADE,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            permission TEXT NOT NULL DEFAULT 'view' CHECK (permission IN ('view', 'edit', 'delete')),
            created_at TIMESTAMPTZ DEFAULT NOW(),
            UNIQUE (file_id, user_id)
        )
    ''')
