"""@mention parsing for task comments."""
import re

# @[Jane Doe](3f2c...-uuid)
BRACKET_MENTION = re.compile(r'@\[([^\]]+)\]\(([a-fA-F0-9-]+)\)')
# @jane or @Jane Doe
PLAIN_MENTION = re.compile(r'@(\w+(?:\s\w+)?)')


def parse_mentions(content, users):
    """Return the ids of mentioned users, first-seen order, no duplicates.

    Explicit ``@[Name](id)`` mentions win. Only when there are none is each
    ``@word`` (or ``@two words``) matched against the users' full names
    (substring) and emails (prefix), case-insensitively.
    """
    ids = [m.group(2) for m in BRACKET_MENTION.finditer(content or '')]

    if not ids and '@' in (content or ''):
        for m in PLAIN_MENTION.finditer(content):
            text = m.group(1).lower()
            for user in users:
                name = (user.get('full_name') or '').lower()
                email = (user.get('email') or '').lower()
                if (name and text in name) or (email and email.startswith(text)):
                    ids.append(str(user['id']))
                    break

    return list(dict.fromkeys(ids))
