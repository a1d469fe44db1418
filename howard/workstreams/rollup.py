"""Status rollups for a workstream's entries.

Worst status wins: any red makes the group red, else any yellow makes it
yellow, else it is green. A group with no entries is green.
"""
from collections import OrderedDict

_SEVERITY = {'green': 0, 'yellow': 1, 'red': 2}


def worst_status(statuses):
    worst = 'green'
    for status in statuses:
        if _SEVERITY.get(status, 0) > _SEVERITY[worst]:
            worst = status
    return worst


def rollup_entries(entries):
    """Per-vertical counts over active entries, in first-seen vertical order.

    Each entry needs ``vertical_id`` and ``status``; ``vertical_name`` and
    ``vertical_display_order`` are carried through when present.
    """
    groups = OrderedDict()
    for entry in entries:
        if entry.get('is_active') is False:
            continue
        vid = entry.get('vertical_id')
        group = groups.get(vid)
        if group is None:
            group = groups[vid] = {
                'vertical_id': vid,
                'vertical_name': entry.get('vertical_name'),
                'display_order': entry.get('vertical_display_order'),
                'red_count': 0,
                'yellow_count': 0,
                'green_count': 0,
                'total_count': 0,
            }
        status = entry.get('status')
        if status in _SEVERITY:
            group[f'{status}_count'] += 1
        group['total_count'] += 1

    rollups = []
    for group in groups.values():
        if group['red_count']:
            group['rollup_status'] = 'red'
        elif group['yellow_count']:
            group['rollup_status'] = 'yellow'
        else:
            group['rollup_status'] = 'green'
        rollups.append(group)
    rollups.sort(key=lambda g: (g['display_order'] is None, g['display_order'] or 0))
    return rollups


def overall_status(rollups):
    return worst_status(r['rollup_status'] for r in rollups)


def rollup_totals(rollups):
    totals = {'red': 0, 'yellow': 0, 'green': 0, 'total': 0}
    for r in rollups:
        totals['red'] += r['red_count']
        totals['yellow'] += r['yellow_count']
        totals['green'] += r['green_count']
        totals['total'] += r['total_count']
    return totals
