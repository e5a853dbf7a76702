"""
Screen discovery over a Figma document tree.
"""
from typing import Any, List, Mapping, Optional

from figma_relay.models import Screen

CANVAS_TYPE = 'CANVAS'
SCREEN_TYPES = ('FRAME', 'SECTION')


def _children(node: Any) -> List[Any]:
    if not isinstance(node, Mapping):
        return []
    children = node.get('children')
    return children if isinstance(children, list) else []


def select_screens(document: Optional[Mapping[str, Any]], limit: int) -> List[Screen]:
    """
    Collect top-level screens in tree order, up to `limit`.

    Walks the direct CANVAS children of the document root and, within each
    canvas, its direct FRAME or SECTION children. Nothing deeper is visited.

    Args:
        document: The `document` node of a Figma file response
        limit: Maximum number of screens to return

    Returns:
        Ordered list of screens; empty when the tree has no qualifying nodes
    """
    screens: List[Screen] = []
    if limit < 1:
        return screens

    for page in _children(document):
        if not isinstance(page, Mapping) or page.get('type') != CANVAS_TYPE:
            continue

        for node in _children(page):
            if not isinstance(node, Mapping) or node.get('type') not in SCREEN_TYPES:
                continue

            screens.append(Screen(id=str(node.get('id', '')), name=str(node.get('name', ''))))
            if len(screens) >= limit:
                break

        if len(screens) >= limit:
            break

    return screens
