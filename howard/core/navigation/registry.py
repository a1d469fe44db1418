"""
Navigation registry: sidebar items of every front-end app.

Each app (``os``, ``crm``, ``university``) lists its items with the roles that
may see them. Icons are lucide icon names; the front end maps them to
components. ``APP_LINKS`` is the app switcher.
"""

import os

EVERYONE = ['admin', 'manager', 'user', 'client']
TEAM = ['admin', 'manager', 'user']
ADMIN_MANAGER = ['admin', 'manager']
CLIENT_ADMIN = ['admin', 'manager', 'client', 'client_no_access']

NAV_ITEMS = {
    'os': [
        {'label': 'Dashboard', 'href': '/dashboard', 'icon': 'LayoutDashboard', 'roles': EVERYONE},
        {'label': 'Files', 'href': '/files', 'icon': 'FolderOpen', 'roles': EVERYONE},
        {'label': 'Tasks', 'href': '/tasks', 'icon': 'CheckSquare', 'roles': EVERYONE},
        {'label': 'Workstreams', 'href': '/workstreams', 'icon': 'ClipboardList', 'roles': EVERYONE},
        {
            'label': 'Tools',
            'href': '/tools/transactions',
            'icon': 'Wrench',
            'roles': ['admin'],
            'children': [
                {'label': 'Transactions', 'href': '/tools/transactions', 'icon': 'ArrowLeftRight', 'roles': ['admin']},
            ],
        },
        {
            'label': 'Clients',
            'href': '/clients/organizations',
            'icon': 'Users',
            'roles': CLIENT_ADMIN,
            'children': [
                {'label': 'Organizations', 'href': '/clients/organizations', 'icon': 'Building2', 'roles': CLIENT_ADMIN},
                {'label': 'Users', 'href': '/clients/users', 'icon': 'Users', 'roles': CLIENT_ADMIN},
            ],
        },
    ],
    'crm': [
        {'label': 'Dashboard', 'href': '/dashboard', 'icon': 'LayoutDashboard', 'roles': EVERYONE},
        {'label': 'Contacts', 'href': '/contacts', 'icon': 'Contact', 'roles': TEAM},
        {'label': 'Deals', 'href': '/deals', 'icon': 'Handshake', 'roles': TEAM},
        {'label': 'Pipeline', 'href': '/pipeline', 'icon': 'GitBranch', 'roles': ADMIN_MANAGER},
    ],
    'university': [
        {'label': 'Dashboard', 'href': '/dashboard', 'icon': 'LayoutDashboard', 'roles': EVERYONE},
        {'label': 'Courses', 'href': '/courses', 'icon': 'BookOpen', 'roles': EVERYONE},
        {'label': 'Students', 'href': '/students', 'icon': 'GraduationCap', 'roles': ADMIN_MANAGER},
        {'label': 'Library', 'href': '/library', 'icon': 'Library', 'roles': EVERYONE},
    ],
}

# app key -> (label, dev url, production url)
APPS = {
    'os': ('HowardOS', 'http://localhost:8888', 'https://howard-os1.netlify.app'),
    'crm': ('Howard CRM', 'http://localhost:8889', 'https://howard-crm.netlify.app'),
    'university': ('Howard University', 'http://localhost:8890', 'https://howard-uni.netlify.app'),
}


def is_dev_mode():
    return os.environ.get('HOWARD_DEV', 'false').lower() == 'true'


def app_links(current_app, dev=None):
    """Links to the other apps, excluding ``current_app``."""
    if dev is None:
        dev = is_dev_mode()
    return [
        {'label': label, 'href': dev_url if dev else prod_url}
        for key, (label, dev_url, prod_url) in APPS.items()
        if key != current_app
    ]
