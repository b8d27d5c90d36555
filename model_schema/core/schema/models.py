"""
Schema Data Models

Typed dataclasses for representing entity, field and relation metadata
derived from ORM model classes.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class FieldType(Enum):
    """Canonical field types."""
    
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    MIXED = "mixed"
    
    # Points at another entity
    REFERENCE = "reference"
    
    @classmethod
    def from_string(cls, type_str: str) -> "FieldType":
        """Convert a type string to enum, unknown strings become MIXED."""
        try:
            return cls(type_str)
        except ValueError:
            return cls.MIXED


@dataclass(frozen=True)
class Pivot:
    """Marks a field as the foreign key backing a relation."""
    
    field: str
    
    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field}
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pivot":
        return cls(field=data["field"])


@dataclass(frozen=True)
class Reference:
    """Pointer from a foreign-key field to the relation and key it targets."""
    
    relation: str                                 # Relation field name, e.g. "owner"
    field: str                                    # Key on the related entity, e.g. "id"
    
    def __str__(self) -> str:
        return f"{self.relation}.{self.field}"
    
    @classmethod
    def parse(cls, value: str) -> "Reference":
        """Parse a ``relation.field`` string."""
        relation, _, key = value.rpartition(".")
        if not relation:
            return cls(relation=key, field="")
        return cls(relation=relation, field=key)


@dataclass(frozen=True)
class Field:
    """
    A single named, typed attribute of an entity.
    
    Reference fields carry the qualified class name of the entity they
    point at in ``related``. A foreign-key field carries a ``pivot`` and a
    ``reference`` once the merger has linked it to its relation.
    """
    
    name: str
    field_type: FieldType = FieldType.MIXED
    related: str | None = None
    pivot: Pivot | None = None
    reference: Reference | None = None
    
    @property
    def is_foreign_key(self) -> bool:
        return self.pivot is not None
    
    def with_link(self, pivot: Pivot, reference: Reference) -> "Field":
        """Return a copy of this field linked to a relation."""
        return replace(self, pivot=pivot, reference=reference)
    
    def __repr__(self) -> str:
        link = f", reference={self.reference}" if self.reference else ""
        return f"Field({self.name}, type={self.field_type.value}{link})"
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "type": self.field_type.value,
            "related": self.related,
            "pivot": self.pivot.to_dict() if self.pivot else None,
            "reference": str(self.reference) if self.reference else None,
        }
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Field":
        """Create from dictionary."""
        return cls(
            name=data["name"],
            field_type=FieldType.from_string(data.get("type", "mixed")),
            related=data.get("related"),
            pivot=Pivot.from_dict(data["pivot"]) if data.get("pivot") else None,
            reference=Reference.parse(data["reference"]) if data.get("reference") else None,
        )


@dataclass
class EntitySchema:
    """
    Schema of one model class.
    
    Built once per discovery pass and not modified afterwards.
    """
    
    name: str                                     # Logical name, e.g. "Post"
    class_name: str                               # Qualified class, e.g. "app.models.Post"
    primary_key: str
    fields: list[Field] = field(default_factory=list)
    
    @property
    def foreign_keys(self) -> list[Field]:
        """Get all fields linked to a relation."""
        return [f for f in self.fields if f.is_foreign_key]
    
    def get_field(self, name: str) -> Field | None:
        """Get field by name."""
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "class_name": self.class_name,
            "primary_key": self.primary_key,
            "fields": [f.to_dict() for f in self.fields],
        }
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntitySchema":
        """Create from dictionary."""
        return cls(
            name=data["name"],
            class_name=data["class_name"],
            primary_key=data["primary_key"],
            fields=[Field.from_dict(f) for f in data.get("fields", [])],
        )


@dataclass(frozen=True)
class MethodDescriptor:
    """A queryable method (scope or column finder). Never emitted in a schema."""
    
    name: str
    return_type: str = ""
    parameters: tuple[str, ...] = ()


@dataclass
class PropertyDescriptor:
    """
    A property accumulated while inspecting a model.
    
    ``field_type`` stays ``None`` until a concrete type is known. A non-empty
    ``comment`` marks a relation property and encodes its foreign key as
    ``"<fk>><relation>.<other_key>"``.
    """
    
    name: str
    field_type: FieldType | None = None
    related: str | None = None
    comment: str = ""


class ModelProfile:
    """
    Properties and methods gathered for one model, in discovery order.
    
    Example:
        >>> profile = ModelProfile()
        >>> profile.set_property("title", FieldType.STRING)
        >>> profile.set_property("title", None)
        >>> profile.properties["title"].field_type
        <FieldType.STRING: 'string'>
    """
    
    def __init__(self) -> None:
        self.properties: dict[str, PropertyDescriptor] = {}
        self.methods: dict[str, MethodDescriptor] = {}
    
    def set_property(
        self,
        name: str,
        field_type: FieldType | None = None,
        comment: str = "",
        related: str | None = None,
    ) -> None:
        """
        Register a property.
        
        The first registration wins. A property registered without a type
        takes the first concrete type given later; a typed property is
        never overwritten.
        """
        existing = self.properties.get(name)
        if existing is None:
            self.properties[name] = PropertyDescriptor(
                name=name,
                field_type=field_type,
                related=related,
                comment=comment or "",
            )
            return
        
        if existing.field_type is None and field_type is not None:
            existing.field_type = field_type
            existing.related = related
    
    def set_method(
        self,
        name: str,
        return_type: str = "",
        parameters: list[str] | tuple[str, ...] = (),
    ) -> None:
        """Register a method, names compare case-insensitively."""
        known = {key.lower() for key in self.methods}
        if name.lower() not in known:
            self.methods[name] = MethodDescriptor(
                name=name,
                return_type=return_type,
                parameters=tuple(parameters),
            )
