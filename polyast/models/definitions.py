"""
Code definition models produced from syntax trees.

These are the higher-level, language-neutral views built by the definition
converter: a compilation unit with its imports, namespaces and types.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from polyast.models.source_location import SourceLocation


class ParameterDefinition(BaseModel):
    """Parameter of a method or function."""

    name: str
    location: Optional[SourceLocation] = None


class MethodDefinition(BaseModel):
    """Method, constructor or free function."""

    name: str
    location: Optional[SourceLocation] = None
    parameters: List[ParameterDefinition] = Field(default_factory=list)
    signature: Optional[str] = Field(None, description="Declaration text up to the body")


class PropertyDefinition(BaseModel):
    """Property declared on a type."""

    name: str
    location: Optional[SourceLocation] = None


class FieldDefinition(BaseModel):
    """Field declared on a type."""

    name: str
    location: Optional[SourceLocation] = None


class InterfaceDefinition(BaseModel):
    """Interface declaration."""

    name: str
    location: Optional[SourceLocation] = None
    methods: List[MethodDefinition] = Field(default_factory=list)
    properties: List[PropertyDefinition] = Field(default_factory=list)


class ClassDefinition(BaseModel):
    """Class-like declaration (class, struct, record, enum)."""

    name: str
    kind: str = Field(..., description="Grammar node type of the declaration")
    location: Optional[SourceLocation] = None
    methods: List[MethodDefinition] = Field(default_factory=list)
    properties: List[PropertyDefinition] = Field(default_factory=list)
    fields: List[FieldDefinition] = Field(default_factory=list)
    classes: List["ClassDefinition"] = Field(default_factory=list)
    interfaces: List[InterfaceDefinition] = Field(default_factory=list)


class NamespaceDefinition(BaseModel):
    """Namespace or module block."""

    name: str
    location: Optional[SourceLocation] = None
    classes: List[ClassDefinition] = Field(default_factory=list)
    interfaces: List[InterfaceDefinition] = Field(default_factory=list)
    namespaces: List["NamespaceDefinition"] = Field(default_factory=list)


class CompilationUnitDefinition(BaseModel):
    """Top-level definition view of one parsed source file."""

    name: Optional[str] = Field(None, description="File path of the compilation unit")
    language: str
    location: Optional[SourceLocation] = None
    imports: List[str] = Field(default_factory=list)
    namespaces: List[NamespaceDefinition] = Field(default_factory=list)
    classes: List[ClassDefinition] = Field(default_factory=list)
    interfaces: List[InterfaceDefinition] = Field(default_factory=list)
    functions: List[MethodDefinition] = Field(default_factory=list)


# Enable forward references for recursive models
ClassDefinition.model_rebuild()
NamespaceDefinition.model_rebuild()
