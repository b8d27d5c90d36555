"""
Schema Inspector

Runs schema discovery over the configured model directories and serves
the result from the schema cache.
"""

import json
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from model_schema.core.logger import GenerationSummary, SchemaLogger
from model_schema.core.schema.behavioral import BehavioralExtractor
from model_schema.core.schema.cache import DEFAULT_CACHE_KEY, SchemaCache
from model_schema.core.schema.merger import SchemaMerger
from model_schema.core.schema.models import EntitySchema, ModelProfile
from model_schema.core.schema.orm import get_key_name, qualified_name
from model_schema.core.schema.scanner import ModelScanner, SchemaError, load_class
from model_schema.core.schema.structural import StructuralExtractor

if TYPE_CHECKING:
    from model_schema.config.loader import SchemaConfig


# Cache shared by inspectors that are not given one
_process_cache = SchemaCache()


def dump_collections(collections: list[EntitySchema]) -> str:
    """Serialize a collection of entity schemas to JSON."""
    return json.dumps([c.to_dict() for c in collections], ensure_ascii=False)


def load_collections(payload: str) -> list[EntitySchema]:
    """Deserialize a collection produced by ``dump_collections``."""
    return [EntitySchema.from_dict(item) for item in json.loads(payload)]


class ModelTimeoutError(SchemaError):
    """Raised when inspecting one model takes longer than allowed."""
    pass


class SchemaInspector:
    """
    Discovers the entity schemas of an application's models.

    For every model class found by the scanner: instantiate it, read its
    table columns (when an engine is available), read its methods and
    relations, and merge both into an EntitySchema. A model that fails is
    logged and skipped; the others are still generated.

    Example:
        >>> inspector = SchemaInspector(
        ...     ModelScanner(["app/models"]),
        ...     base=Base,
        ...     engine=create_engine("sqlite:///app.db"),
        ... )
        >>> collections = inspector.get_collections()   # scans once
        >>> collections = inspector.get_collections()   # served from cache
        >>> inspector.invalidate()
    """

    def __init__(
        self,
        scanner: ModelScanner,
        base: type,
        engine: Engine | None = None,
        table_prefix: str = "",
        cache: SchemaCache | None = None,
        cache_key: str = DEFAULT_CACHE_KEY,
        logger: Any = None,
        model_timeout: float | None = None,
    ):
        """
        Initialize schema inspector.

        Args:
            scanner: Finds model classes
            base: Declarative base the models derive from
            engine: SQLAlchemy engine for column metadata (None = code only)
            table_prefix: Prefix prepended to table names
            cache: Cache for the serialized collections
            cache_key: Key the collections are stored under
            logger: Progress sink with info/debug/warning/error methods
            model_timeout: Seconds allowed per model (None = unbounded)
        """
        self.logger = logger or SchemaLogger()
        self.scanner = scanner
        self.base = base
        self.cache = cache or _process_cache
        self.cache_key = cache_key
        self.model_timeout = model_timeout

        self.structural = StructuralExtractor(engine, table_prefix)
        self.behavioral = BehavioralExtractor(base, logger=self.logger)
        self.merger = SchemaMerger(logger=self.logger)
        self.last_summary: GenerationSummary | None = None

    @classmethod
    def from_config(
        cls,
        config: "SchemaConfig",
        cache: SchemaCache | None = None,
        logger: Any = None,
    ) -> "SchemaInspector":
        """
        Build an inspector from configuration.

        Args:
            config: Validated configuration
            cache: Cache to use (file cache when configured, else process cache)
            logger: Progress sink (console logger when None)
        """
        logger = logger or SchemaLogger(
            console_output=config.logging.console_output,
            level=config.logging.level,
        )
        scanner = ModelScanner(config.model_locations, config.base_path, logger=logger)
        scanner.add_import_roots()

        engine = None
        if config.database.url:
            engine = create_engine(config.database.url, echo=config.database.echo)

        if cache is None and config.cache.directory:
            cache = SchemaCache(config.cache.directory)

        return cls(
            scanner,
            base=load_class(config.base_class),
            engine=engine,
            table_prefix=config.database.table_prefix,
            cache=cache,
            cache_key=config.cache.key,
            logger=logger,
            model_timeout=config.model_timeout,
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get_collections(self) -> list[EntitySchema]:
        """
        Return all entity schemas, generating them on the first call.

        The serialized result is cached forever; call ``invalidate`` to
        force the next call to scan again.
        """
        payload = self.cache.remember_forever(
            self.cache_key,
            lambda: dump_collections(self.generate_collections()),
        )
        return load_collections(payload)

    def invalidate(self) -> None:
        """Drop the cached collections."""
        self.cache.invalidate(self.cache_key)

    def generate_collections(self) -> list[EntitySchema]:
        """
        Scan the model directories and build every entity schema.

        Raises:
            ScanError: If a model directory cannot be read
        """
        summary = GenerationSummary(
            started_at=datetime.now(),
            structural=self.structural.available,
        )
        collections: list[EntitySchema] = []

        for model_class in self.scanner.discover(self.base):
            summary.models_found += 1
            name = qualified_name(model_class)
            try:
                collections.append(self._run_with_timeout(model_class))
            except ModelTimeoutError as e:
                self.logger.warning(str(e))
                summary.models_failed.append(name)
            except Exception as e:
                self.logger.error(f"Skipping {name}: {e}")
                summary.models_failed.append(name)

        summary.entities_generated = len(collections)
        summary.completed_at = datetime.now()
        self.last_summary = summary

        if hasattr(self.logger, "print_summary"):
            self.logger.print_summary(summary)
        return collections

    def generate_collection(self, model_class: type) -> EntitySchema:
        """Build the entity schema of one model class."""
        return self._inspect_model(model_class)

    def inspect_profile(self, model_class: type) -> ModelProfile:
        """
        Gather the raw properties and methods of one model class.

        Exposes the method descriptors (scopes, column finders), which are
        not part of the emitted schema.
        """
        model = model_class()
        profile = ModelProfile()

        if self.structural.available:
            self.structural.extract(model, profile)
        self.behavioral.extract(model, profile)
        return profile

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _inspect_model(self, model_class: type) -> EntitySchema:
        profile = self.inspect_profile(model_class)
        return self.merger.merge(
            model_class.__name__,
            qualified_name(model_class),
            get_key_name(model_class),
            profile,
        )

    def _run_with_timeout(self, model_class: type) -> EntitySchema:
        if not self.model_timeout:
            return self._inspect_model(model_class)

        outcome: dict[str, Any] = {}

        def run() -> None:
            try:
                outcome["schema"] = self._inspect_model(model_class)
            except Exception as e:
                outcome["error"] = e

        # Daemon worker: an overrunning model is abandoned and never holds
        # the process open at exit
        worker = threading.Thread(
            target=run,
            name=f"inspect-{model_class.__name__}",
            daemon=True,
        )
        worker.start()
        worker.join(self.model_timeout)

        if worker.is_alive():
            raise ModelTimeoutError(
                f"Skipping {qualified_name(model_class)}: inspection exceeded "
                f"{self.model_timeout}s"
            )
        if "error" in outcome:
            raise outcome["error"]
        return outcome["schema"]


def get_collections(
    config: "SchemaConfig",
    cache: SchemaCache | None = None,
    logger: Any = None,
) -> list[EntitySchema]:
    """Return the cached entity schemas for a configuration."""
    return SchemaInspector.from_config(config, cache=cache, logger=logger).get_collections()
