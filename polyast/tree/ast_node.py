"""
Abstract Syntax Tree node.

A node owns its children; the parent link is a weak back-reference used only
for upward traversal. Parser adapters build and mutate nodes, after which the
owning SyntaxTree freezes them.
"""

import uuid
import weakref
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from polyast.models.source_location import SourceLocation
from polyast.tree.visitor import AstVisitor, ResultT

NodeT = TypeVar("NodeT", bound="AstNode")


def _names_match(left: Optional[str], right: Optional[str]) -> bool:
    if left is None or right is None:
        return left is right
    return left.casefold() == right.casefold()


class AstNode:
    """Language-agnostic syntax tree node."""

    def __init__(
        self,
        node_type: str,
        name: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        """
        Create a detached node.

        Args:
            node_type: Grammar type of the node (e.g. 'class_declaration')
            name: Declared name, if the construct has one
            location: Span of the node in the source text

        Raises:
            ValueError: If node_type is empty
        """
        if not node_type:
            raise ValueError("node_type is required")

        self._id = uuid.uuid4()
        self._node_type = node_type
        self._name = name
        self._location = location
        self._text: Optional[str] = None
        self._is_error = False
        self._is_missing = False
        self._parent: Optional["weakref.ReferenceType[AstNode]"] = None
        self._children: List[AstNode] = []
        self._metadata: Dict[str, Any] = {}
        self._frozen = False

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def node_type(self) -> str:
        return self._node_type

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def location(self) -> Optional[SourceLocation]:
        return self._location

    @property
    def text(self) -> Optional[str]:
        """Raw text captured by the parser (may be truncated)."""
        return self._text

    @property
    def is_error(self) -> bool:
        """True if the grammar could not match this construct."""
        return self._is_error

    @property
    def is_missing(self) -> bool:
        """True if error recovery inserted this node for an absent token."""
        return self._is_missing

    @property
    def parent(self) -> Optional["AstNode"]:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def children(self) -> Tuple["AstNode", ...]:
        return tuple(self._children)

    @property
    def metadata(self) -> Mapping[str, Any]:
        return MappingProxyType(self._metadata)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # Mutation (parser adapters only, before the tree is frozen)

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"AST node '{self._node_type}' is read-only")

    def set_text(self, text: Optional[str]) -> None:
        self._ensure_mutable()
        self._text = text

    def set_error(self, is_error: bool) -> None:
        self._ensure_mutable()
        self._is_error = is_error

    def set_missing(self, is_missing: bool) -> None:
        self._ensure_mutable()
        self._is_missing = is_missing

    def set_metadata(self, key: str, value: Any) -> None:
        if key is None:
            raise ValueError("metadata key is required")
        self._ensure_mutable()
        self._metadata[key] = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self._metadata.get(key, default)

    def add_child(self, child: "AstNode") -> None:
        """
        Append a child and point its parent link at this node.

        Raises:
            ValueError: If child is None, already attached to a parent,
                or is this node or one of its ancestors
        """
        if child is None:
            raise ValueError("child is required")
        self._ensure_mutable()

        if child.parent is not None:
            raise ValueError(
                f"Node '{child.node_type}' already belongs to '{child.parent.node_type}'"
            )

        ancestor: Optional[AstNode] = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("Adding this child would create a cycle")
            ancestor = ancestor.parent

        child._parent = weakref.ref(self)
        self._children.append(child)

    def add_children(self, children: Iterable["AstNode"]) -> None:
        if children is None:
            raise ValueError("children is required")
        for child in children:
            self.add_child(child)

    def remove_child(self, child: "AstNode") -> bool:
        """
        Detach the first occurrence of ``child`` (by identity).

        Returns:
            True if the child was removed, False if it was not a child
        """
        if child is None:
            raise ValueError("child is required")
        self._ensure_mutable()

        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                child._parent = None
                return True
        return False

    def freeze(self) -> None:
        """Make this node and its whole subtree read-only."""
        self._frozen = True
        for node in self.get_descendants():
            node._frozen = True

    # Queries

    def get_child(self, name: str) -> Optional["AstNode"]:
        """Return the first direct child whose name matches case-insensitively."""
        for child in self._children:
            if _names_match(child.name, name):
                return child
        return None

    def get_children(self, of_type: Type[NodeT]) -> List[NodeT]:
        """Return the direct children that are instances of ``of_type``."""
        return [child for child in self._children if isinstance(child, of_type)]

    def get_descendants(
        self,
        of_type: Optional[Type[NodeT]] = None,
    ) -> Iterator["AstNode"]:
        """
        Lazily yield all descendants in depth-first pre-order.

        The node itself is excluded; siblings are visited left to right.
        Every call starts a fresh traversal.

        Args:
            of_type: Only yield descendants that are instances of this class
        """
        stack: List[AstNode] = list(reversed(self._children))
        while stack:
            node = stack.pop()
            if of_type is None or isinstance(node, of_type):
                yield node
            stack.extend(reversed(node._children))

    def find_descendant(self, name: str) -> Optional["AstNode"]:
        """Return the first descendant (pre-order) with a matching name."""
        return next(self.find_descendants(name), None)

    def find_descendants(self, name: str) -> Iterator["AstNode"]:
        """Yield all descendants (pre-order) with a matching name."""
        return (node for node in self.get_descendants() if _names_match(node.name, name))

    def find_all(self, predicate: Callable[["AstNode"], bool]) -> Iterator["AstNode"]:
        """Yield descendants accepted by ``predicate``, in pre-order."""
        return (node for node in self.get_descendants() if predicate(node))

    def get_path(self) -> List["AstNode"]:
        """Return the nodes from the tree root down to and including this node."""
        path: List[AstNode] = []
        current: Optional[AstNode] = self
        while current is not None:
            path.append(current)
            current = current.parent
        path.reverse()
        return path

    def get_depth(self) -> int:
        """Number of parent hops to the root (the root has depth 0)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def accept(self, visitor: AstVisitor[ResultT]) -> ResultT:
        if visitor is None:
            raise ValueError("visitor is required")
        return visitor.visit(self)

    def __repr__(self) -> str:
        return f"AstNode(node_type={self._node_type!r}, name={self._name!r}, location={self._location!r})"

    def __str__(self) -> str:
        name = f" ({self._name})" if self._name else ""
        text = f" '{self._text}'" if self._text else ""
        return f"{self._node_type}{name}{text}"
