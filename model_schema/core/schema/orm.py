"""
ORM Adapter

Thin helpers over SQLAlchemy's declarative mapping that answer the
questions schema discovery asks of a model: is it a model, can it be
instantiated, which table backs it, which key identifies it.
"""

import inspect
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.exc import UnmappedColumnError


# Columns treated as date attributes when a model keeps timestamps
TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def qualified_name(cls: type) -> str:
    """Return ``module.QualName`` for a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def get_mapper(cls: type) -> Mapper | None:
    """Return the SQLAlchemy mapper of a class, or None when unmapped."""
    return sa_inspect(cls, raiseerr=False)


def is_model_class(cls: Any, base: type) -> bool:
    """True for subclasses of the declarative base (the base itself excluded)."""
    return isinstance(cls, type) and cls is not base and issubclass(cls, base)


def is_instantiable(cls: type) -> bool:
    """True for concrete, mapped classes."""
    if inspect.isabstract(cls):
        return False
    if cls.__dict__.get("__abstract__", False):
        return False
    return get_mapper(cls) is not None


def get_table(model: Any) -> tuple[str | None, str]:
    """
    Return ``(schema, table)`` for a model class or instance.
    
    Raises:
        ValueError: If the model is not mapped to a table
    """
    cls = model if isinstance(model, type) else type(model)
    table = getattr(cls, "__table__", None)
    if table is None:
        mapper = get_mapper(cls)
        table = mapper.local_table if mapper is not None else None
    if table is None or not hasattr(table, "name"):
        raise ValueError(f"{qualified_name(cls)} is not mapped to a table")
    return table.schema, table.name


def get_key_name(model: Any) -> str:
    """
    Return the primary-key attribute name of a model.
    
    ``__key_name__`` overrides the mapper's first primary-key column.
    """
    cls = model if isinstance(model, type) else type(model)
    explicit = getattr(cls, "__key_name__", None)
    if explicit:
        return explicit
    
    mapper = get_mapper(cls)
    if mapper is None or not mapper.primary_key:
        return "id"
    column = mapper.primary_key[0]
    try:
        return mapper.get_property_by_column(column).key
    except UnmappedColumnError:
        return column.key


def get_dates(model: Any) -> list[str]:
    """
    Return the column names treated as dates.
    
    ``__dates__`` lists extra columns; ``created_at``/``updated_at`` are
    added unless ``__timestamps__`` is False.
    """
    dates = list(getattr(model, "__dates__", ()) or ())
    if getattr(model, "__timestamps__", True):
        dates.extend(name for name in TIMESTAMP_COLUMNS if name not in dates)
    return dates
