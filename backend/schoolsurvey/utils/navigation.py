"""Breadcrumb trail derivation for portal URLs."""

from __future__ import annotations

SEGMENT_LABELS = {
    "admin": "Administration",
    "teacher": "Teacher Dashboard",
    "student": "Student Dashboard",
}


def breadcrumb_label(segment: str) -> str:
    """Display label for one path segment."""
    if segment in SEGMENT_LABELS:
        return SEGMENT_LABELS[segment]
    return segment[:1].upper() + segment[1:]


def breadcrumb_trail(path: str) -> list[dict]:
    """Return the crumbs for `path`, starting at Home.

    The root path yields no trail; any other path (even `//`) starts at
    Home. Each crumb links to the cumulative path up to its segment; the
    last crumb is marked `current`.
    """
    if not path or path == "/":
        return []
    segments = [s for s in path.split("/") if s]
    crumbs = [{"label": "Home", "href": "/", "current": False}]
    for idx, segment in enumerate(segments):
        crumbs.append({
            "label": breadcrumb_label(segment),
            "href": "/" + "/".join(segments[: idx + 1]),
            "current": idx == len(segments) - 1,
        })
    return crumbs
