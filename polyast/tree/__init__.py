"""Syntax tree model: nodes, trees and traversal helpers."""

from .ast_node import AstNode
from .line_index import LineIndex
from .syntax_tree import SyntaxTree
from .visitor import AstVisitor

__all__ = [
    "AstNode",
    "AstVisitor",
    "LineIndex",
    "SyntaxTree",
]
