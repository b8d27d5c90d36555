"""
Behavioral Extractor

Infers properties and query methods from a model's code: accessor and
mutator methods, query scopes, relation methods, explicitly registered
accessors/scopes, and SQLAlchemy ``relationship()`` declarations.
"""

import inspect
import re
from types import FunctionType
from typing import Any, Callable

from model_schema.core.schema.models import FieldType, ModelProfile
from model_schema.core.schema.naming import camel, snake
from model_schema.core.schema.orm import get_mapper, qualified_name
from model_schema.core.schema.relations import (
    RELATION_CONSTRUCTORS,
    HasRelations,
    Relation,
    RelationKind,
    resolving,
)


# Dispatch methods that look like accessors/scopes but are not
RESERVED_METHODS = frozenset({
    "get_attribute",
    "set_attribute",
    "getAttribute",
    "setAttribute",
    "scope_query",
    "scopeQuery",
})

RELATION_CALL = re.compile(
    r"\bself\.(" + "|".join(RELATION_CONSTRUCTORS) + r")\s*\("
)


def _unwrap(attr: Any) -> FunctionType | None:
    if isinstance(attr, (classmethod, staticmethod)):
        attr = attr.__func__
    if not isinstance(attr, FunctionType) and hasattr(attr, "__wrapped__"):
        attr = inspect.unwrap(attr)
    if isinstance(attr, FunctionType):
        return attr
    return None


def _accessor_name(method: str) -> str | None:
    """Return the property name of ``get_<x>_attribute``/``set_<x>_attribute``."""
    if method in RESERVED_METHODS:
        return None
    if not method.startswith(("get", "set")):
        return None
    if not method.lower().endswith("attribute"):
        return None
    return snake(method[3:-9]) or None


def _scope_name(method: str) -> str | None:
    """Return the method name of ``scope_<x>``."""
    if method in RESERVED_METHODS or not method.startswith("scope"):
        return None
    return camel(method[5:]) or None


def scope_parameters(func: Callable[..., Any], bound: bool = True) -> list[str]:
    """
    Return a scope's parameter names without ``self`` and the query argument.

    Args:
        func: The scope function
        bound: Whether the first parameter is ``self``/``cls``
    """
    try:
        parameters = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return []

    if bound and parameters:
        parameters = parameters[1:]
    # Remove the query argument
    parameters = parameters[1:]

    names = []
    for parameter in parameters:
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            names.append(f"*{parameter.name}")
        elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
            names.append(f"**{parameter.name}")
        else:
            names.append(parameter.name)
    return names


class BehavioralExtractor:
    """
    Classifies a model's methods by convention.

    Conventions:
    - ``get_<name>_attribute`` / ``set_<name>_attribute``: untyped property
      ``<name>``
    - ``scope_<name>``: query method ``<name>`` (camel case)
    - a method whose body calls a ``HasRelations`` constructor: relation,
      resolved by calling the method
    - ``__accessors__`` / ``__scopes__``: explicit registration
    - SQLAlchemy ``relationship()`` attributes: relations read from the mapper

    Single-valued relations add a reference property annotated with their
    foreign key. Many-valued relations carry no foreign key on the parent,
    they are reported and left out of the schema.
    """

    def __init__(self, base: type, logger: Any = None):
        """
        Initialize extractor.

        Args:
            base: The declarative base class; its methods are never inspected
            logger: Progress sink with info/debug/warning methods
        """
        self.base = base
        self.logger = logger
        self._base_names = frozenset(dir(base)) | frozenset(dir(HasRelations))

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def extract(self, model: Any, profile: ModelProfile) -> None:
        """
        Register the properties and methods inferred from the model's code.

        Args:
            model: Model instance
            profile: Profile receiving properties and methods
        """
        cls = type(model)

        for name, func, bound in self.iter_methods(cls):
            accessor = _accessor_name(name)
            if accessor:
                profile.set_property(accessor, None)
                continue

            if name.startswith(("get", "set")) and name.lower().endswith("attribute"):
                continue

            scope = _scope_name(name)
            if scope:
                profile.set_method(
                    scope,
                    f"Query|{qualified_name(cls)}",
                    scope_parameters(func, bound=bound),
                )
                continue

            if name in self._base_names or name.startswith("get"):
                continue

            if self.declares_relation(func):
                self._extract_relation_method(model, name, profile)

        self._extract_registered(cls, profile)
        self._extract_mapped_relationships(cls, profile)

    def iter_methods(self, cls: type) -> list[tuple[str, FunctionType, bool]]:
        """
        List the public methods reachable on a class.

        Returns:
            ``(name, function, bound)`` tuples in ``dir()`` order; ``bound`` is
            False for static methods
        """
        methods = []
        for name in dir(cls):
            if name.startswith("_"):
                continue
            try:
                attr = inspect.getattr_static(cls, name)
            except AttributeError:
                continue
            func = _unwrap(attr)
            if func is None:
                continue
            methods.append((name, func, not isinstance(attr, staticmethod)))
        return methods

    def declares_relation(self, func: Callable[..., Any]) -> bool:
        """Check whether a method body calls a relation constructor."""
        try:
            source = inspect.getsource(func)
        except (OSError, TypeError):
            return False
        return RELATION_CALL.search(source) is not None

    def register_relation(self, relation: Relation, profile: ModelProfile) -> None:
        """Add the property of a resolved relation."""
        self._info(f"This is {relation.kind.value}")

        if relation.kind.is_many:
            # Foreign key lives on the related or pivot table
            self._debug(
                f"Relation '{relation.name}' ({relation.kind.value}) has no "
                f"foreign key on {relation.parent.__name__}, left unresolved"
            )
            return

        if relation.kind is RelationKind.MORPH_TO:
            related = qualified_name(self.base)
        else:
            related = qualified_name(relation.related)

        profile.set_property(
            relation.name,
            FieldType.REFERENCE,
            comment=relation.annotation,
            related=related,
        )

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _extract_relation_method(self, model: Any, name: str, profile: ModelProfile) -> None:
        try:
            with resolving(name):
                result = getattr(model, name)()
        except Exception as e:
            self._warning(f"Relation method {type(model).__name__}.{name} failed: {e}")
            return

        if isinstance(result, Relation):
            self._debug("It is an instance of Relation")
            self.register_relation(result, profile)

    def _extract_registered(self, cls: type, profile: ModelProfile) -> None:
        for accessor in getattr(cls, "__accessors__", ()) or ():
            profile.set_property(snake(accessor), None)

        scopes = getattr(cls, "__scopes__", {}) or {}
        if not isinstance(scopes, dict):
            scopes = {name: () for name in scopes}
        for scope, parameters in scopes.items():
            profile.set_method(camel(scope), f"Query|{qualified_name(cls)}", list(parameters))

    def _extract_mapped_relationships(self, cls: type, profile: ModelProfile) -> None:
        mapper = get_mapper(cls)
        if mapper is None:
            return

        for prop in mapper.relationships:
            relation = self._relation_from_property(cls, prop)
            if relation is not None:
                self.register_relation(relation, profile)

    def _relation_from_property(self, cls: type, prop: Any) -> Relation | None:
        direction = prop.direction.name
        related = prop.mapper.class_
        pairs = list(prop.local_remote_pairs or [])

        if direction == "MANYTOMANY":
            kind = RelationKind.BELONGS_TO_MANY
        elif direction == "MANYTOONE":
            kind = RelationKind.BELONGS_TO
        elif prop.uselist:
            kind = RelationKind.HAS_MANY
        else:
            kind = RelationKind.HAS_ONE

        if kind.is_many:
            return Relation(kind, prop.key, cls, related, "", "")
        if not pairs:
            return None

        local, remote = pairs[0]
        if kind is RelationKind.BELONGS_TO:
            foreign_key, other_key = local.name, remote.name
        else:
            foreign_key, other_key = f"{remote.table.name}.{remote.name}", local.name

        return Relation(kind, prop.key, cls, related, foreign_key, other_key)

    def _info(self, message: str) -> None:
        if self.logger is not None:
            self.logger.info(message)

    def _debug(self, message: str) -> None:
        if self.logger is not None:
            self.logger.debug(message)

    def _warning(self, message: str) -> None:
        if self.logger is not None:
            self.logger.warning(message)
