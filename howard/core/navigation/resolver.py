"""Role filtering of navigation trees."""


def filter_nav_items(items, role):
    """Items whose ``roles`` contain ``role``, applied recursively to children.

    A parent hidden from the role disappears together with its children.
    Returns new dicts; the registry is never mutated.
    """
    if not role:
        return []
    visible = []
    for item in items:
        if role not in item.get('roles', ()):
            continue
        entry = {k: v for k, v in item.items() if k != 'children'}
        if 'children' in item:
            entry['children'] = filter_nav_items(item['children'], role)
        visible.append(entry)
    return visible


def resolve_navigation(app, role, nav_items, links):
    return {
        'app': app,
        'items': filter_nav_items(nav_items.get(app, []), role),
        'app_links': links,
    }
