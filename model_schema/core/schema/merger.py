"""
Schema Merger

Turns the properties gathered for one model into an ordered field list,
linking foreign-key fields to the relations that own them.
"""

from typing import Any

from model_schema.core.schema.models import (
    EntitySchema,
    Field,
    FieldType,
    ModelProfile,
    Pivot,
    Reference,
)


def parse_annotation(comment: str) -> tuple[str, Reference] | None:
    """
    Parse a foreign-key annotation.

    Args:
        comment: ``"<fk>><relation>.<other_key>"``

    Returns:
        ``(fk, reference)`` or None when the annotation is malformed
    """
    foreign_key, separator, target = comment.partition(">")
    if not separator or not foreign_key or not target:
        return None
    return foreign_key, Reference.parse(target)


class SchemaMerger:
    """
    Builds an EntitySchema from a ModelProfile.

    Plain properties become fields in accumulation order. An annotated
    (relation) property does not become a field itself: it attaches a Pivot
    and a Reference to the already-emitted field named by its foreign key.
    When no such field exists the link is dropped and the other fields are
    unaffected.

    Example:
        >>> merger = SchemaMerger()
        >>> schema = merger.merge("Post", "app.models.Post", "id", profile)
        >>> schema.get_field("owner_id").reference
        Reference(relation='owner', field='id')
    """

    def __init__(self, logger: Any = None):
        self.logger = logger

    def merge(
        self,
        name: str,
        class_name: str,
        primary_key: str,
        profile: ModelProfile,
    ) -> EntitySchema:
        """
        Merge a profile into an entity schema.

        Args:
            name: Logical entity name
            class_name: Qualified class name
            primary_key: Primary-key field name
            profile: Accumulated properties

        Returns:
            The entity schema
        """
        fields: list[Field] = []

        for prop_name, prop in profile.properties.items():
            if not prop.comment:
                fields.append(Field(
                    name=prop_name,
                    field_type=prop.field_type or FieldType.MIXED,
                    related=prop.related,
                ))
                continue

            parsed = parse_annotation(prop.comment)
            if parsed is None:
                self._debug(f"{name}.{prop_name}: malformed relation annotation '{prop.comment}'")
                continue

            foreign_key, reference = parsed
            for index, existing in enumerate(fields):
                if existing.name == foreign_key:
                    fields[index] = existing.with_link(Pivot(foreign_key), reference)
                    break
            else:
                self._debug(
                    f"{name}.{prop_name}: foreign key '{foreign_key}' is not a field, "
                    f"relation left unlinked"
                )

        return EntitySchema(
            name=name,
            class_name=class_name,
            primary_key=primary_key,
            fields=fields,
        )

    def _debug(self, message: str) -> None:
        if self.logger is not None:
            self.logger.debug(message)
