"""
Category hierarchy resolver

Holds a category forest as received from the catalog service and answers the
questions the product and category editors ask about it: where a category
lives, which parents it may legally move under, and how to render it as an
indented list. ``reparent`` is the only way a parent assignment changes.
"""
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from bookcatalog.core.exceptions import CycleError, NotFoundError, ValidationError
from bookcatalog.core.logging import log
from bookcatalog.schemas.category import CategoryNode, CategoryPath, CategoryRecord, FlatCategory
from bookcatalog.utils.normalization import blank_to_none, normalize_id


def indent_label(node: CategoryNode, depth: int) -> str:
    """Selector label with one dash per nesting level"""
    return f"{'—' * depth} {node.title}".lstrip()


class CategoryHierarchy:
    """Rooted forest of categories with an id -> parent index"""

    def __init__(self, roots: Iterable[Union[CategoryNode, dict]] = ()):
        self.roots: List[CategoryNode] = [
            node if isinstance(node, CategoryNode) else CategoryNode.model_validate(node)
            for node in roots
        ]
        self._build_index()

    @classmethod
    def from_flat(cls, records: Iterable[Union[CategoryRecord, dict]]) -> "CategoryHierarchy":
        """
        Build the forest from the flat admin list where each row only knows
        its ``parentId``. Sibling order follows the list order.
        """
        rows = [
            row if isinstance(row, CategoryRecord) else CategoryRecord.model_validate(row)
            for row in records
        ]

        nodes: Dict[str, CategoryNode] = {}
        for row in rows:
            key = normalize_id(row.id)
            if key in nodes:
                raise ValidationError("categories", f"duplicate category id '{row.id}'")
            nodes[key] = CategoryNode(id=row.id, parent_id=row.parent_id, title=row.title)

        roots: List[CategoryNode] = []
        for row in rows:
            node = nodes[normalize_id(row.id)]
            if node.parent_id is None:
                roots.append(node)
                continue

            parent = nodes.get(normalize_id(node.parent_id))
            if parent is None:
                log.warning("Category parent missing, treating as root", category_id=node.id, parent_id=node.parent_id)
                node.parent_id = None
                roots.append(node)
            elif parent is node:
                raise CycleError(f"Category '{node.id}' is its own parent", node_id=node.id)
            else:
                parent.children.append(node)

        # Rows caught in a parent loop never hang off a root
        reachable: Set[str] = set()
        stack = list(roots)
        while stack:
            node = stack.pop()
            reachable.add(normalize_id(node.id))
            stack.extend(node.children)

        stranded = [row.id for row in rows if normalize_id(row.id) not in reachable]
        if stranded:
            raise CycleError(
                f"Categories form a parent cycle: {', '.join(stranded)}",
                category_ids=stranded,
            )

        return cls(roots)

    def _build_index(self) -> None:
        self._parents: Dict[str, Optional[CategoryNode]] = {}
        self._count = 0

        stack: List[Tuple[CategoryNode, Optional[CategoryNode]]] = [(root, None) for root in reversed(self.roots)]
        while stack:
            node, parent = stack.pop()
            key = normalize_id(node.id)
            if key in self._parents:
                raise ValidationError("categories", f"duplicate category id '{node.id}'")
            self._parents[key] = parent
            self._count += 1
            stack.extend((child, node) for child in reversed(node.children))

    def __len__(self) -> int:
        return self._count

    def __contains__(self, category_id) -> bool:
        return normalize_id(category_id) in self._parents

    # ----- Lookup -----

    def _search(self, target: str) -> Optional[CategoryNode]:
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            if normalize_id(node.id) == target:
                return node
            stack.extend(reversed(node.children))
        return None

    def get_node(self, category_id) -> Optional[CategoryNode]:
        """Depth-first lookup, None when the id is not in the forest"""
        if blank_to_none(category_id) is None:
            return None
        return self._search(normalize_id(category_id))

    def find_node(self, category_id) -> CategoryNode:
        """Depth-first lookup comparing trimmed, case-insensitive ids"""
        node = self.get_node(category_id)
        if node is None:
            raise NotFoundError(f"Category '{category_id}' not found", category_id=str(category_id))
        return node

    def path_to(self, category_id) -> CategoryPath:
        """Ids from the root down to ``category_id``, inclusive"""
        node = self.find_node(category_id)
        path = [node.id]
        parent = self._parents[normalize_id(node.id)]
        while parent is not None:
            path.append(parent.id)
            parent = self._parents[normalize_id(parent.id)]
        path.reverse()
        return path

    def parent_of(self, category_id) -> Optional[CategoryNode]:
        key = normalize_id(category_id)
        if key not in self._parents:
            raise NotFoundError(f"Category '{category_id}' not found", category_id=str(category_id))
        return self._parents[key]

    def ancestors(self, category_id) -> CategoryPath:
        return self.path_to(category_id)[:-1]

    def is_leaf(self, category_id) -> bool:
        return not self.find_node(category_id).children

    # ----- Traversal -----

    def flatten(self) -> List[Tuple[CategoryNode, int]]:
        """Pre-order (node, depth) pairs, parents before children"""
        result: List[Tuple[CategoryNode, int]] = []
        stack = [(root, 0) for root in reversed(self.roots)]
        while stack:
            node, depth = stack.pop()
            result.append((node, depth))
            stack.extend((child, depth + 1) for child in reversed(node.children))
        return result

    def descendant_ids(self, category_id) -> Set[str]:
        """Normalized ids of every category below ``category_id``"""
        found: Set[str] = set()
        stack = list(self.find_node(category_id).children)
        while stack:
            node = stack.pop()
            found.add(normalize_id(node.id))
            stack.extend(node.children)
        return found

    def _blocked(self, category_id) -> Set[str]:
        node = self.find_node(category_id)
        return {normalize_id(node.id)} | self.descendant_ids(node.id)

    def legal_parents(self, excluded_id=None) -> List[CategoryNode]:
        """
        Every category that ``excluded_id`` may be moved under: all nodes
        except the category itself and its descendants. With no excluded id
        (a category being created) every node qualifies.
        """
        return [node for node, _ in self.parent_options(excluded_id)]

    def parent_options(self, excluded_id=None) -> List[Tuple[CategoryNode, int]]:
        """Legal parents flattened with their depth, for an indented selector"""
        blocked = self._blocked(excluded_id) if blank_to_none(excluded_id) is not None else set()
        return [(node, depth) for node, depth in self.flatten() if normalize_id(node.id) not in blocked]

    # ----- Mutation -----

    def reparent(self, node_id, new_parent_id=None) -> CategoryNode:
        """
        Move ``node_id`` under ``new_parent_id`` (or to the roots when None).

        Raises CycleError when the new parent is the node itself or one of
        its descendants; the forest is left untouched in that case.
        """
        node = self.find_node(node_id)
        new_parent = None
        if blank_to_none(new_parent_id) is not None:
            new_parent = self.find_node(new_parent_id)
            if normalize_id(new_parent.id) in self._blocked(node.id):
                log.debug("Rejected category move", node_id=node.id, new_parent_id=new_parent.id)
                raise CycleError(
                    f"Category '{new_parent.id}' cannot become the parent of '{node.id}'",
                    node_id=node.id,
                    new_parent_id=new_parent.id,
                )

        old_parent = self._parents[normalize_id(node.id)]
        if old_parent is not new_parent:
            siblings = old_parent.children if old_parent else self.roots
            siblings[:] = [sibling for sibling in siblings if sibling is not node]
            (new_parent.children if new_parent else self.roots).append(node)

        node.parent_id = new_parent.id if new_parent else None
        self._build_index()

        log.info(
            "Moved category",
            node_id=node.id,
            old_parent_id=old_parent.id if old_parent else None,
            new_parent_id=node.parent_id,
        )
        return node

    # ----- Output -----

    def flat_entries(self, excluded_id=None) -> List[FlatCategory]:
        return [
            FlatCategory(
                id=node.id,
                parent_id=parent.id if (parent := self._parents[normalize_id(node.id)]) else None,
                title=node.title,
                depth=depth,
                label=indent_label(node, depth),
            )
            for node, depth in self.parent_options(excluded_id)
        ]

    def to_payload(self) -> List[dict]:
        return [root.to_payload() for root in self.roots]
