"""
Notification templates.

`{{ name }}` placeholders are replaced from the event variables. Unknown
names render as an empty string, never as the literal token.
"""

import re
from typing import Mapping, Optional

PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


def render(template: Optional[str], variables: Mapping[str, str]) -> str:
    if not template:
        return ""
    return PLACEHOLDER.sub(lambda m: variables.get(m.group(1), ""), template)
