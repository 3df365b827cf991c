"""Naming and path based pre-filter for candidate pairs.

These predicates narrow the set of pairs worth comparing before the
similarity engine runs. They are never applied by ``analyze`` itself;
callers opt in by passing ``should_compare`` as a pair filter.
"""

from enum import Enum
from functools import lru_cache

from .models import ComponentRecord

# Entry points and shells that are never duplicate candidates
EXCLUDED_NAMES = frozenset({"App", "Root", "Main", "Layout", "index"})

# Route groups in these areas serve different audiences
DISTINCT_CONTEXTS = frozenset({"auth", "marketing", "admin", "dashboard"})
CONTEXT_DIRECTORIES = ("auth", "marketing", "admin", "dashboard", "components")
DEFAULT_CONTEXT = "general"


class ComponentType(Enum):
    """Role of a component inferred from its file path."""

    PAGE = "page"
    COMPONENT = "component"
    LAYOUT = "layout"
    FEATURE = "feature"
    OTHER = "other"


_TYPE_SEGMENTS = (
    ("/pages/", ComponentType.PAGE),
    ("/components/", ComponentType.COMPONENT),
    ("/layouts/", ComponentType.LAYOUT),
    ("/features/", ComponentType.FEATURE),
)


def _is_type_name(name: str) -> bool:
    return (
        name.endswith(("Type", "Types")) or "Interface" in name or "Enum" in name
    )


def _is_utility_name(name: str) -> bool:
    return name.endswith(("Util", "Utils", "Helper", "Helpers"))


def _is_context_name(name: str) -> bool:
    return name.endswith(("Context", "Provider"))


def _is_hoc_name(name: str) -> bool:
    return name.startswith("with") and len(name) > 4 and name[4].isupper()


def _is_pascal_case(name: str) -> bool:
    return bool(name) and name[0].isupper() and "_" not in name and "-" not in name


def is_valid_component(record: ComponentRecord) -> bool:
    """Whether a record is a plausible duplicate candidate.

    Excludes declaration and test files, hooks, application shells, and
    names that look like types, utilities, contexts, providers or
    higher-order components.
    """
    name = record.name
    file_path = record.file_path.lower()

    if file_path.endswith(".d.ts"):
        return False
    if ".test." in file_path or ".spec." in file_path:
        return False
    if name.startswith("use") or name in EXCLUDED_NAMES:
        return False
    if _is_type_name(name) or _is_utility_name(name) or _is_context_name(name):
        return False
    if _is_hoc_name(name):
        return False
    return _is_pascal_case(name)


def get_component_type(file_path: str) -> ComponentType:
    """Classify a component by the first matching directory segment."""
    lower_path = file_path.lower()
    for segment, component_type in _TYPE_SEGMENTS:
        if segment in lower_path:
            return component_type
    return ComponentType.OTHER


def extract_context(file_path: str) -> str:
    """Route group ``(name)`` or known directory a component lives under."""
    parts = file_path.split("/")
    for part in parts:
        if len(part) > 2 and part.startswith("(") and part.endswith(")"):
            return part[1:-1]
    for part in parts:
        if part.lower() in CONTEXT_DIRECTORIES:
            return part.lower()
    return DEFAULT_CONTEXT


def contexts_compatible(path_a: str, path_b: str) -> bool:
    """False only when both paths sit in different distinct areas."""
    context_a = extract_context(path_a)
    context_b = extract_context(path_b)
    return not (
        context_a in DISTINCT_CONTEXTS
        and context_b in DISTINCT_CONTEXTS
        and context_a != context_b
    )


@lru_cache(maxsize=4096)
def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current
    return previous[-1]


def should_compare(
    comp_a: ComponentRecord,
    comp_b: ComponentRecord,
    name_distance_threshold: float = 0.7,
) -> bool:
    """Whether a pair passes the naming and location pre-filter.

    Args:
        comp_a: First component.
        comp_b: Second component.
        name_distance_threshold: Maximum edit distance as a share of the
            longer name.
    """
    if not is_valid_component(comp_a) or not is_valid_component(comp_b):
        return False
    if comp_a.file_path == comp_b.file_path:
        return False
    if get_component_type(comp_a.file_path) != get_component_type(comp_b.file_path):
        return False
    if not contexts_compatible(comp_a.file_path, comp_b.file_path):
        return False

    distance = levenshtein_distance(comp_a.name, comp_b.name)
    longest = max(len(comp_a.name), len(comp_b.name))
    return distance <= longest * name_distance_threshold
