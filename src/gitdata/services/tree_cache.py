"""In-memory memoization of tree objects keyed by requested identifier."""

import logging
from typing import Dict, Optional

from ..models import TreeObject

logger = logging.getLogger(__name__)


class TreeCache:
    """Tree cache owned by a single client instance.

    Keys are the identifiers used in requests (tag names or shas). Entries are
    never evicted or invalidated; concurrent writers race and the last one
    wins. When disabled, lookups always miss and stores are ignored.
    """

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self._trees: Dict[str, TreeObject] = {}

    def get(self, identifier: str) -> Optional[TreeObject]:
        if not self.enabled:
            return None
        tree = self._trees.get(identifier)
        if tree is not None:
            logger.debug(f"Tree cache hit for {identifier}")
        return tree

    def put(self, identifier: str, tree: TreeObject) -> None:
        if not self.enabled:
            return
        self._trees[identifier] = tree

    def clear(self) -> None:
        self._trees.clear()

    def __contains__(self, identifier: str) -> bool:
        return self.enabled and identifier in self._trees

    def __len__(self) -> int:
        return len(self._trees)
