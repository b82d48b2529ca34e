"""drf-spectacular post-processing: one feature tag per operation.

Router-generated operations are otherwise tagged with the first path segment
("api"), which lumps every endpoint together in the Swagger UI.
"""

from __future__ import annotations

from typing import Any

# Method names that contain operations in the OpenAPI path item
_HTTP_METHODS = {"get", "post", "put", "patch", "delete", "options", "head"}

# (path prefix, tag, description); the first matching prefix wins
PATTERN_TAGS = [
    ("/api/v1/departments", "Departments", "Department hierarchy and choices"),
    ("/api/v1/assignments", "Assignments", "Explicit evaluation and bonus pairings"),
    ("/api/v1/team", "Team", "Who the requester may evaluate or reward"),
    ("/api/v1/bonus", "Bonus Allocation", "Per-department yearly bonus drafts"),
    ("/api/v1/auth/jwt", "JWT Authentication", "Token issue and refresh"),
]

ALL_TAGS = [tag for _, tag, _ in PATTERN_TAGS]


def assign_group_tag(path: str) -> str | None:
    """Return the first matching tag name for a given path."""
    for prefix, tag, _ in PATTERN_TAGS:
        if path.startswith(prefix):
            return tag
    return None


def _operations(path_item: dict[str, Any]):
    for method, operation in path_item.items():
        if method.lower() in _HTTP_METHODS and isinstance(operation, dict):
            yield operation


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    for path, path_item in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if tag is None:
            continue
        for operation in _operations(path_item):
            operation["tags"] = [tag]

    declared = result.setdefault("tags", [])
    existing = {t.get("name") for t in declared}
    for _, tag, description in PATTERN_TAGS:
        if tag not in existing:
            declared.append({"name": tag, "description": description})
    return result
