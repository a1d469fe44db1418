"""Workstream payload validation. Validators raise ValueError (-> 400)."""

WORKSTREAM_STATUSES = ('red', 'yellow', 'green')
WORKSTREAM_TIMINGS = ('daily', 'weekly', 'monthly', 'quarterly', 'annual', 'ad-hoc')
NAME_MAX_LENGTH = 200
DEFAULT_ENTRY_STATUS = 'yellow'


def validate_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValueError('Name is required')
    name = name.strip()
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f'Name must be less than {NAME_MAX_LENGTH} characters')
    return name


def validate_status(status):
    if status not in WORKSTREAM_STATUSES:
        raise ValueError('Invalid status')
    return status


def validate_timing(timing):
    """``None`` is allowed (timing is optional)."""
    if timing is not None and timing not in WORKSTREAM_TIMINGS:
        raise ValueError('Invalid timing')
    return timing


def validate_display_order(value):
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError('display_order must be an integer')
    return value


def _optional_text(data, key, out):
    if key in data:
        value = data[key]
        if value is not None and not isinstance(value, str):
            raise ValueError(f'{key} must be text')
        out[key] = value


def clean_template(data, partial=False):
    """Validated template fields. ``partial`` skips required-field checks."""
    out = {}
    if not partial or 'vertical_id' in data:
        if not data.get('vertical_id'):
            raise ValueError('Vertical is required')
        out['vertical_id'] = data['vertical_id']
    if not partial or 'name' in data:
        out['name'] = validate_name(data.get('name'))
    for key in ('description', 'associated_software'):
        _optional_text(data, key, out)
    if 'timing' in data:
        out['timing'] = validate_timing(data['timing'])
    if 'display_order' in data:
        out['display_order'] = validate_display_order(data['display_order'])
    elif not partial:
        out['display_order'] = 0
    if 'default_sop' in data:
        out['default_sop'] = data['default_sop']
    if partial and 'is_active' in data:
        out['is_active'] = bool(data['is_active'])
    return out


def clean_workstream(data, partial=False):
    out = {}
    if not partial:
        if not data.get('org_id'):
            raise ValueError('Organization is required')
        out['org_id'] = data['org_id']
        out['name'] = validate_name(data.get('name') or 'Workstream')
    elif 'name' in data:
        out['name'] = validate_name(data['name'])
    _optional_text(data, 'notes', out)
    if partial and 'is_active' in data:
        out['is_active'] = bool(data['is_active'])
    return out


def clean_entry(data, partial=False):
    out = {}
    if not partial:
        for key, label in (('workstream_id', 'Workstream'), ('vertical_id', 'Vertical')):
            if not data.get(key):
                raise ValueError(f'{label} is required')
            out[key] = data[key]
        out['name'] = validate_name(data.get('name'))
        out['status'] = validate_status(data.get('status', DEFAULT_ENTRY_STATUS))
        out['display_order'] = validate_display_order(data.get('display_order', 0))
        out['template_id'] = data.get('template_id') or None
    else:
        if 'name' in data:
            out['name'] = validate_name(data['name'])
        if 'status' in data:
            out['status'] = validate_status(data['status'])
        if 'display_order' in data:
            out['display_order'] = validate_display_order(data['display_order'])
        if 'is_active' in data:
            out['is_active'] = bool(data['is_active'])
    for key in ('description', 'associated_software', 'notes'):
        _optional_text(data, key, out)
    if 'timing' in data:
        out['timing'] = validate_timing(data['timing'])
    if 'point_person_id' in data:
        out['point_person_id'] = data['point_person_id'] or None
    if 'custom_sop' in data:
        out['custom_sop'] = data['custom_sop']
    return out
