"""
Node-type rules used to build code definitions from syntax trees.

Each language maps its grammar node types onto definition kinds. Languages
without an entry fall back to substring matching on the node type.
"""

from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field


class DefinitionRules(BaseModel):
    """Grammar node types that introduce each kind of definition."""

    model_config = ConfigDict(frozen=True)

    import_types: FrozenSet[str] = Field(default_factory=frozenset)
    namespace_types: FrozenSet[str] = Field(default_factory=frozenset)
    file_scoped_namespace_types: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Namespace node types whose members are the declarations that follow them",
    )
    class_types: FrozenSet[str] = Field(default_factory=frozenset)
    interface_types: FrozenSet[str] = Field(default_factory=frozenset)
    method_types: FrozenSet[str] = Field(default_factory=frozenset)
    function_types: FrozenSet[str] = Field(default_factory=frozenset)
    property_types: FrozenSet[str] = Field(default_factory=frozenset)
    field_types: FrozenSet[str] = Field(default_factory=frozenset)
    parameter_list_types: FrozenSet[str] = Field(default_factory=frozenset)
    body_types: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Node types where a method signature ends",
    )


LANGUAGE_RULES: Dict[str, DefinitionRules] = {
    "csharp": DefinitionRules(
        import_types=frozenset({"using_directive"}),
        namespace_types=frozenset({"namespace_declaration", "file_scoped_namespace_declaration"}),
        file_scoped_namespace_types=frozenset({"file_scoped_namespace_declaration"}),
        class_types=frozenset({
            "class_declaration",
            "struct_declaration",
            "record_declaration",
            "enum_declaration",
        }),
        interface_types=frozenset({"interface_declaration"}),
        method_types=frozenset({"method_declaration", "constructor_declaration"}),
        property_types=frozenset({"property_declaration"}),
        field_types=frozenset({"field_declaration"}),
        parameter_list_types=frozenset({"parameter_list"}),
        body_types=frozenset({"block", "arrow_expression_clause"}),
    ),
    "java": DefinitionRules(
        import_types=frozenset({"import_declaration"}),
        class_types=frozenset({"class_declaration", "enum_declaration", "record_declaration"}),
        interface_types=frozenset({"interface_declaration"}),
        method_types=frozenset({"method_declaration", "constructor_declaration"}),
        field_types=frozenset({"field_declaration", "constant_declaration"}),
        parameter_list_types=frozenset({"formal_parameters"}),
        body_types=frozenset({"block", "constructor_body"}),
    ),
    "typescript": DefinitionRules(
        import_types=frozenset({"import_statement"}),
        namespace_types=frozenset({"internal_module", "module"}),
        class_types=frozenset({"class_declaration", "abstract_class_declaration", "enum_declaration"}),
        interface_types=frozenset({"interface_declaration"}),
        method_types=frozenset({"method_definition", "method_signature", "abstract_method_signature"}),
        function_types=frozenset({"function_declaration", "generator_function_declaration"}),
        property_types=frozenset({"property_signature"}),
        field_types=frozenset({"public_field_definition"}),
        parameter_list_types=frozenset({"formal_parameters"}),
        body_types=frozenset({"statement_block"}),
    ),
    "javascript": DefinitionRules(
        import_types=frozenset({"import_statement"}),
        class_types=frozenset({"class_declaration"}),
        method_types=frozenset({"method_definition"}),
        function_types=frozenset({"function_declaration", "generator_function_declaration"}),
        field_types=frozenset({"field_definition"}),
        parameter_list_types=frozenset({"formal_parameters"}),
        body_types=frozenset({"statement_block"}),
    ),
    "python": DefinitionRules(
        import_types=frozenset({"import_statement", "import_from_statement"}),
        class_types=frozenset({"class_definition"}),
        function_types=frozenset({"function_definition"}),
        parameter_list_types=frozenset({"parameters"}),
        body_types=frozenset({"block"}),
    ),
    "json": DefinitionRules(),
}

# TSX shares the TypeScript grammar's declaration node types
LANGUAGE_RULES["tsx"] = LANGUAGE_RULES["typescript"]


def get_rules(language: str) -> "DefinitionRules | None":
    """Return the built-in rules for a language, or None if there are none."""
    return LANGUAGE_RULES.get(language.lower())
