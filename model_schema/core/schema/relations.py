"""
Relation Descriptors

Declarative relation constructors for models. A relation method calls one
of the ``HasRelations`` constructors and returns the resulting
``Relation``; the behavioral extractor recognises those calls and reads
the keys from the returned descriptor.

Example:
    >>> class Post(HasRelations, Base):
    ...     __tablename__ = "posts"
    ...     id = mapped_column(Integer, primary_key=True)
    ...     owner_id = mapped_column(ForeignKey("users.id"))
    ...
    ...     def owner(self):
    ...         return self.belongs_to(User)
"""

import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from model_schema.core.schema.naming import snake
from model_schema.core.schema.orm import get_key_name, get_table


class RelationKind(Enum):
    """Relation constructors a model can call."""

    HAS_MANY = "has_many"
    HAS_MANY_THROUGH = "has_many_through"
    BELONGS_TO_MANY = "belongs_to_many"
    HAS_ONE = "has_one"
    BELONGS_TO = "belongs_to"
    MORPH_ONE = "morph_one"
    MORPH_TO = "morph_to"
    MORPH_MANY = "morph_many"
    MORPH_TO_MANY = "morph_to_many"

    @property
    def is_many(self) -> bool:
        """True for relations returning a collection of models."""
        return self in MANY_VALUED_KINDS


MANY_VALUED_KINDS = frozenset({
    RelationKind.HAS_MANY,
    RelationKind.HAS_MANY_THROUGH,
    RelationKind.BELONGS_TO_MANY,
    RelationKind.MORPH_MANY,
    RelationKind.MORPH_TO_MANY,
})


@dataclass(frozen=True)
class Relation:
    """
    A resolved relation between a parent model and a related model.

    ``foreign_key`` and ``other_key`` follow the owning side: for
    ``belongs_to`` the foreign key is a column of the parent, for
    ``has_one``/``has_many`` it is qualified with the related table.
    ``related`` is None for ``morph_to``, whose target is only known per row.
    """

    kind: RelationKind
    name: str
    parent: type
    related: type | None
    foreign_key: str
    other_key: str
    morph_type: str | None = None

    @property
    def annotation(self) -> str:
        """Foreign-key annotation, ``"<fk>><relation>.<other_key>"``."""
        return f"{self.foreign_key}>{self.name}.{self.other_key}"


# Name of the relation method currently being resolved
_resolving: ContextVar[str | None] = ContextVar("resolving_relation", default=None)


@contextmanager
def resolving(name: str) -> Iterator[None]:
    """
    Name the relations built while the method ``name`` runs.

    Decorated or generated relation methods do not carry their attribute
    name in their code object, so the caller supplies it.
    """
    token = _resolving.set(name)
    try:
        yield
    finally:
        _resolving.reset(token)


def _caller_name() -> str:
    name = _resolving.get()
    if name is not None:
        return name
    # 0: this helper, 1: the constructor, 2: the relation method
    return sys._getframe(2).f_code.co_name


def _foreign_key_for(cls: type) -> str:
    return f"{snake(cls.__name__)}_{get_key_name(cls)}"


def _qualify(table: str, column: str) -> str:
    return column if "." in column else f"{table}.{column}"


class HasRelations:
    """
    Mixin adding relation constructors to a declarative model.

    Defaults follow the usual conventions: ``belongs_to`` looks for
    ``<relation>_<related key>`` on the parent, ``has_one``/``has_many`` look
    for ``<parent>_<parent key>`` on the related table, polymorphic relations
    use ``<name>_id``/``<name>_type``.
    """

    def belongs_to(
        self,
        related: type,
        foreign_key: str | None = None,
        other_key: str | None = None,
        relation: str | None = None,
    ) -> Relation:
        relation = relation or _caller_name()
        other_key = other_key or get_key_name(related)
        return Relation(
            kind=RelationKind.BELONGS_TO,
            name=relation,
            parent=type(self),
            related=related,
            foreign_key=foreign_key or f"{snake(relation)}_{other_key}",
            other_key=other_key,
        )

    def has_one(
        self,
        related: type,
        foreign_key: str | None = None,
        local_key: str | None = None,
    ) -> Relation:
        return self._has_one_or_many(
            RelationKind.HAS_ONE, _caller_name(), related, foreign_key, local_key
        )

    def has_many(
        self,
        related: type,
        foreign_key: str | None = None,
        local_key: str | None = None,
    ) -> Relation:
        return self._has_one_or_many(
            RelationKind.HAS_MANY, _caller_name(), related, foreign_key, local_key
        )

    def has_many_through(
        self,
        related: type,
        through: type,
        first_key: str | None = None,
        second_key: str | None = None,
    ) -> Relation:
        _, through_table = get_table(through)
        first_key = first_key or _foreign_key_for(type(self))
        return Relation(
            kind=RelationKind.HAS_MANY_THROUGH,
            name=_caller_name(),
            parent=type(self),
            related=related,
            foreign_key=_qualify(through_table, first_key),
            other_key=second_key or _foreign_key_for(through),
        )

    def belongs_to_many(
        self,
        related: type,
        table: str | None = None,
        foreign_key: str | None = None,
        other_key: str | None = None,
    ) -> Relation:
        if table is None:
            table = "_".join(sorted([snake(type(self).__name__), snake(related.__name__)]))
        return Relation(
            kind=RelationKind.BELONGS_TO_MANY,
            name=_caller_name(),
            parent=type(self),
            related=related,
            foreign_key=_qualify(table, foreign_key or _foreign_key_for(type(self))),
            other_key=_qualify(table, other_key or _foreign_key_for(related)),
        )

    def morph_one(
        self,
        related: type,
        name: str,
        morph_type: str | None = None,
        morph_id: str | None = None,
        local_key: str | None = None,
    ) -> Relation:
        return self._morph_one_or_many(
            RelationKind.MORPH_ONE, _caller_name(), related, name, morph_type, morph_id, local_key
        )

    def morph_many(
        self,
        related: type,
        name: str,
        morph_type: str | None = None,
        morph_id: str | None = None,
        local_key: str | None = None,
    ) -> Relation:
        return self._morph_one_or_many(
            RelationKind.MORPH_MANY, _caller_name(), related, name, morph_type, morph_id, local_key
        )

    def morph_to(
        self,
        name: str | None = None,
        morph_type: str | None = None,
        morph_id: str | None = None,
        owner_key: str = "id",
    ) -> Relation:
        name = name or _caller_name()
        return Relation(
            kind=RelationKind.MORPH_TO,
            name=name,
            parent=type(self),
            related=None,
            foreign_key=morph_id or f"{snake(name)}_id",
            other_key=owner_key,
            morph_type=morph_type or f"{snake(name)}_type",
        )

    def morph_to_many(
        self,
        related: type,
        name: str,
        table: str | None = None,
        foreign_key: str | None = None,
        other_key: str | None = None,
    ) -> Relation:
        table = table or f"{snake(name)}s"
        return Relation(
            kind=RelationKind.MORPH_TO_MANY,
            name=_caller_name(),
            parent=type(self),
            related=related,
            foreign_key=_qualify(table, foreign_key or f"{snake(name)}_id"),
            other_key=_qualify(table, other_key or _foreign_key_for(related)),
            morph_type=f"{snake(name)}_type",
        )

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _has_one_or_many(
        self,
        kind: RelationKind,
        relation: str,
        related: type,
        foreign_key: str | None,
        local_key: str | None,
    ) -> Relation:
        _, related_table = get_table(related)
        return Relation(
            kind=kind,
            name=relation,
            parent=type(self),
            related=related,
            foreign_key=_qualify(related_table, foreign_key or _foreign_key_for(type(self))),
            other_key=local_key or get_key_name(type(self)),
        )

    def _morph_one_or_many(
        self,
        kind: RelationKind,
        relation: str,
        related: type,
        name: str,
        morph_type: str | None,
        morph_id: str | None,
        local_key: str | None,
    ) -> Relation:
        _, related_table = get_table(related)
        return Relation(
            kind=kind,
            name=relation,
            parent=type(self),
            related=related,
            foreign_key=_qualify(related_table, morph_id or f"{snake(name)}_id"),
            other_key=local_key or get_key_name(type(self)),
            morph_type=morph_type or f"{snake(name)}_type",
        )


# Names of the constructors, as they appear in relation method bodies
RELATION_CONSTRUCTORS = tuple(kind.value for kind in RelationKind)
