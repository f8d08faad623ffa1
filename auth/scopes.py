"""
OAuth scope definitions for the Google Docs markdown tools.

Scope groups are the short names used by `require_google_service`; each group
expands to the scopes a tool needs before the service is built.
"""

# Google Docs scopes
DOCS_READONLY_SCOPE = "https://www.googleapis.com/auth/documents.readonly"
DOCS_WRITE_SCOPE = "https://www.googleapis.com/auth/documents"

SCOPE_GROUPS: dict[str, list[str]] = {
    "docs_read": [DOCS_READONLY_SCOPE],
    "docs_write": [DOCS_WRITE_SCOPE],
}

# A write grant implies read access.
SCOPE_IMPLICATIONS: dict[str, set[str]] = {
    DOCS_WRITE_SCOPE: {DOCS_READONLY_SCOPE},
}


def get_scopes_for_group(group: str) -> list[str]:
    """Return the scopes for a scope group, raising KeyError for unknown groups."""
    return list(SCOPE_GROUPS[group])


def expand_granted_scopes(granted: list[str] | None) -> set[str]:
    """Return granted scopes plus every scope they imply."""
    expanded = set(granted or [])
    for scope in list(expanded):
        expanded |= SCOPE_IMPLICATIONS.get(scope, set())
    return expanded
