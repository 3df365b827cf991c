"""Tag classification shared by every similarity stage.

Structure metrics, structure comparison and the common-pattern penalty
all classify tags through these helpers so a tag is never counted as a
component in one stage and as an intrinsic element in another.
"""

from ..models import ElementNode

# Property carrying an element's CSS classes
STYLE_PROPERTY = "className"

# Generic layout primitives and widget names shared by most components.
# Markup made mostly of these is weak evidence of duplication.
GENERIC_UI_TAGS = frozenset(
    [
        "Alert",
        "AlertTitle",
        "AlertDescription",
        "AlertCircle",
        "Card",
        "CardHeader",
        "CardTitle",
        "CardContent",
        "Button",
        "Input",
        "Label",
        "div",
        "span",
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "Separator",
        "Badge",
    ]
)


def is_component_tag(tag_name: str) -> bool:
    """Whether a tag refers to a nested component (uppercase initial)."""
    return bool(tag_name) and tag_name[0].isupper()


def has_style_property(node: ElementNode) -> bool:
    """Whether the node declares a styling property."""
    return node.get_property(STYLE_PROPERTY) is not None


def class_tokens(node: ElementNode) -> list[str]:
    """Class tokens of a single node, quotes stripped, in source order."""
    prop = node.get_property(STYLE_PROPERTY)
    if prop is None or not prop.type:
        return []
    return prop.type.replace('"', "").replace("'", "").split()


def collect_class_tokens(tree: ElementNode | None) -> set[str]:
    """All class tokens used anywhere in a tree."""
    if tree is None:
        return set()
    tokens: set[str] = set()
    for node, _, _ in tree.iter_nodes():
        tokens.update(class_tokens(node))
    return tokens


def generic_tag_fraction(tree: ElementNode | None) -> float:
    """Fraction of a tree's tags that are generic UI tags (0 for no tree)."""
    if tree is None:
        return 0.0
    tags = tree.tag_names()
    if not tags:
        return 0.0
    return sum(1 for tag in tags if tag in GENERIC_UI_TAGS) / len(tags)
