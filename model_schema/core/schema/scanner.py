"""
Model Scanner

Discovers model classes by importing the Python modules found under the
configured model directories.
"""

import importlib
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from model_schema.core.schema.orm import is_instantiable, is_model_class


class SchemaError(Exception):
    """Base error of schema discovery."""
    pass


class ScanError(SchemaError):
    """Raised when a model directory cannot be read."""
    pass


class ModelLoadError(SchemaError):
    """Raised when a class identifier cannot be resolved."""
    pass


def module_name_for(path: Path) -> tuple[Path, str]:
    """
    Derive the dotted module name of a source file.

    Walks up through directories holding an ``__init__.py``; the first
    directory without one is the import root.

    Returns:
        ``(import_root, module_name)``
    """
    path = path.resolve()
    parts = [] if path.name == "__init__.py" else [path.stem]
    directory = path.parent
    while (directory / "__init__.py").exists():
        parts.insert(0, directory.name)
        directory = directory.parent
    return directory, ".".join(parts)


def load_class(identifier: str) -> type:
    """
    Resolve ``package.module.ClassName`` (or ``package.module:ClassName``).

    Raises:
        ModelLoadError: If the module or class cannot be loaded
    """
    if ":" in identifier:
        module_name, _, qualname = identifier.partition(":")
    else:
        module_name, _, qualname = identifier.rpartition(".")

    if not module_name or not qualname:
        raise ModelLoadError(f"Invalid class identifier: {identifier}")

    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        raise ModelLoadError(f"Cannot import {module_name}: {e}") from e

    obj: Any = module
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ModelLoadError(f"{identifier} not found") from e

    if not isinstance(obj, type):
        raise ModelLoadError(f"{identifier} is not a class")
    return obj


class ModelScanner:
    """
    Finds classes defined in the modules under a set of directories.

    Example:
        >>> scanner = ModelScanner(["app/models"], base_path="/srv/app")
        >>> scanner.scan()
        ['app.models.post.Post', 'app.models.user.User']
        >>> [cls.__name__ for cls in scanner.discover(Base)]
        ['Post', 'User']
    """

    def __init__(
        self,
        directories: list[str | Path],
        base_path: str | Path | None = None,
        logger: Any = None,
    ):
        """
        Initialize scanner.

        Args:
            directories: Directories holding model modules
            base_path: Root for relative directories (defaults to cwd)
            logger: Progress sink with info/debug/warning methods
        """
        self.directories = [Path(d) for d in directories]
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.logger = logger

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def scan(self) -> list[str]:
        """
        List the classes defined under the configured directories.

        Returns:
            Deduplicated ``module.QualName`` identifiers in discovery order

        Raises:
            ScanError: If a configured path exists but cannot be read
        """
        identifiers: list[str] = []
        seen: set[str] = set()

        for path in self.iter_source_files():
            module = self._import(path)
            if module is None:
                continue

            for obj in vars(module).values():
                if not isinstance(obj, type) or obj.__module__ != module.__name__:
                    continue
                identifier = f"{obj.__module__}.{obj.__qualname__}"
                if identifier not in seen:
                    seen.add(identifier)
                    identifiers.append(identifier)

        return identifiers

    def discover(self, base: type) -> list[type]:
        """
        List the instantiable model classes under the directories.

        Classes that are not models, cannot be instantiated or cannot be
        loaded are skipped.

        Args:
            base: The declarative base models derive from
        """
        return self.filter_models(self.scan(), base)

    def filter_models(self, identifiers: list[str], base: type) -> list[type]:
        """Load the identified classes and keep the instantiable models."""
        models = []
        for identifier in identifiers:
            try:
                cls = load_class(identifier)
            except ModelLoadError as e:
                self._warning(f"Skipping {identifier}: {e}")
                continue

            if not is_model_class(cls, base):
                continue
            self._info(f"Model : {identifier}")

            if not is_instantiable(cls):
                self._debug(f"Skipping {identifier}: not instantiable")
                continue
            models.append(cls)
        return models

    def add_import_roots(self) -> None:
        """Make the packages under the directories importable."""
        for directory in self.resolve_directories():
            root = directory.resolve()
            while (root / "__init__.py").exists():
                root = root.parent
            if str(root) not in sys.path:
                sys.path.append(str(root))

    def iter_source_files(self) -> list[Path]:
        """List the ``*.py`` files under the directories, sorted per directory."""
        files: list[Path] = []
        for directory in self.resolve_directories():
            try:
                found = sorted(
                    p for p in directory.rglob("*.py")
                    if "__pycache__" not in p.parts and p.is_file()
                )
            except OSError as e:
                raise ScanError(f"Cannot read model directory {directory}: {e}") from e
            files.extend(found)
        return files

    def resolve_directories(self) -> list[Path]:
        """
        Resolve configured directories against the base path.

        Missing directories are skipped.

        Raises:
            ScanError: If a configured path is not a directory
        """
        resolved = []
        for directory in self.directories:
            path = directory if directory.is_absolute() else self.base_path / directory
            if not path.exists():
                self._debug(f"Model directory not found: {path}")
                continue
            if not path.is_dir():
                raise ScanError(f"Model location is not a directory: {path}")
            resolved.append(path)
        return resolved

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _import(self, path: Path) -> ModuleType | None:
        root, module_name = module_name_for(path)
        if not module_name:
            return None

        if module_name in sys.modules:
            return sys.modules[module_name]

        if str(root) not in sys.path:
            sys.path.append(str(root))

        try:
            return importlib.import_module(module_name)
        except Exception as e:
            self._warning(f"Cannot import {path}: {e}")
            return None

    def _info(self, message: str) -> None:
        if self.logger is not None:
            self.logger.info(message)

    def _debug(self, message: str) -> None:
        if self.logger is not None:
            self.logger.debug(message)

    def _warning(self, message: str) -> None:
        if self.logger is not None:
            self.logger.warning(message)
