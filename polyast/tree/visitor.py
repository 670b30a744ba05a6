"""Visitor interface for AST traversal."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from polyast.tree.ast_node import AstNode

ResultT = TypeVar("ResultT")


class AstVisitor(ABC, Generic[ResultT]):
    """Base interface for code that walks AST nodes via ``AstNode.accept``."""

    @abstractmethod
    def visit(self, node: "AstNode") -> ResultT:
        """
        Visit a node.

        Args:
            node: Node being visited

        Returns:
            Whatever result the concrete visitor produces
        """
        pass
