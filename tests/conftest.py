"""
Shared fixtures.
"""

import importlib
import sys
import textwrap
import uuid
from dataclasses import dataclass
from pathlib import Path

import pytest
from sqlalchemy import create_engine

from model_schema.core.logger import SchemaLogger

from sample_models import Base


BASE_SOURCE = """
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
"""


@dataclass
class ModelPackage:
    """A throwaway package of model modules on disk."""

    name: str
    path: Path
    root: Path

    @property
    def base(self) -> type:
        return importlib.import_module(f"{self.name}.base").Base


@pytest.fixture
def engine(tmp_path):
    """SQLite database holding the sample model tables."""
    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def logger():
    return SchemaLogger(console_output=False, level="DEBUG")


@pytest.fixture
def make_package(tmp_path):
    """
    Create packages of model modules.

    ``PKG`` in module sources is replaced with the generated package name.
    """
    saved_path = list(sys.path)
    created: list[str] = []

    def _make(files: dict[str, str]) -> ModelPackage:
        name = f"app_{uuid.uuid4().hex[:8]}"
        package = tmp_path / name
        package.mkdir()
        (package / "__init__.py").write_text("", encoding="utf-8")
        (package / "base.py").write_text(BASE_SOURCE, encoding="utf-8")
        for filename, source in files.items():
            target = package / filename
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(
                textwrap.dedent(source).replace("PKG", name),
                encoding="utf-8",
            )
        created.append(name)
        sys.path.append(str(tmp_path.resolve()))
        return ModelPackage(name=name, path=package, root=tmp_path)

    yield _make

    sys.path[:] = saved_path
    for name in created:
        for module in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
            del sys.modules[module]
