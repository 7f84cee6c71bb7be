"""Subscription categories: built-in defaults plus user-defined extensions."""
from typing import Iterable

ALL_CATEGORIES = "All"

DEFAULT_CATEGORIES = (
    "Entertainment", "Gaming", "Education", "Fitness", "News",
    "Work", "Utility", "Lifestyle", "Other",
)

CATEGORY_COLORS = {
    "Entertainment": "#4f46e5",
    "Gaming": "#8b5cf6",
    "Education": "#06b6d4",
    "Fitness": "#10b981",
    "News": "#f59e0b",
    "Work": "#3b82f6",
    "Utility": "#64748b",
    "Lifestyle": "#ec4899",
    "Other": "#94a3b8",
}
FALLBACK_COLORS = ("#4f46e5", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#06b6d4", "#ec4899")


def category_color(name: str, index: int) -> str:
    return CATEGORY_COLORS.get(name) or FALLBACK_COLORS[index % len(FALLBACK_COLORS)]


def all_categories(custom: Iterable[str], used: Iterable[str]) -> list[str]:
    """Sorted union of defaults, custom categories and categories in use."""
    return sorted(set(DEFAULT_CATEGORIES) | set(custom) | set(used))


def add_category(custom: list[str], name: str) -> list[str]:
    """New custom list with `name` appended; blank or already known names are a no-op."""
    name = (name or "").strip()
    if not name or name in custom or name in DEFAULT_CATEGORIES or name == ALL_CATEGORIES:
        return list(custom)
    return [*custom, name]


def remove_category(custom: list[str], name: str) -> list[str]:
    return [c for c in custom if c != name]
