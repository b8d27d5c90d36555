"""
Tests for the ModelScanner.
"""

import pytest

from model_schema.core.logger import LogLevel
from model_schema.core.schema.scanner import (
    ModelLoadError,
    ModelScanner,
    ScanError,
    load_class,
    module_name_for,
)

from package_sources import BROKEN, HELPERS, SHOP_MODELS


@pytest.fixture
def shop(make_package):
    return make_package({"models.py": SHOP_MODELS, "broken.py": BROKEN})


class TestModuleNameFor:
    """Tests for dotted module name derivation."""
    
    def test_package_module(self, tmp_path):
        """Test package module."""
        package = tmp_path / "app" / "models"
        package.mkdir(parents=True)
        (tmp_path / "app" / "__init__.py").write_text("")
        (package / "__init__.py").write_text("")
        (package / "post.py").write_text("")
        
        root, name = module_name_for(package / "post.py")
        
        assert root == tmp_path.resolve()
        assert name == "app.models.post"
    
    def test_package_init(self, tmp_path):
        """Test package init."""
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "__init__.py").write_text("")
        
        _, name = module_name_for(tmp_path / "app" / "__init__.py")
        
        assert name == "app"
    
    def test_plain_module(self, tmp_path):
        """Test plain module."""
        (tmp_path / "models.py").write_text("")
        
        root, name = module_name_for(tmp_path / "models.py")
        
        assert root == tmp_path.resolve()
        assert name == "models"


class TestLoadClass:
    """Tests for class identifier resolution."""
    
    def test_dotted(self):
        """Test loading a dotted identifier."""
        from sample_models import Post
        assert load_class("sample_models.Post") is Post
    
    def test_colon(self):
        """Test loading a 'module:Name' identifier."""
        from sample_models import Base
        assert load_class("sample_models:Base") is Base
    
    def test_missing_class(self):
        """Test missing class."""
        with pytest.raises(ModelLoadError):
            load_class("sample_models.Missing")
    
    def test_missing_module(self):
        """Test missing module."""
        with pytest.raises(ModelLoadError):
            load_class("no_such_module.Thing")
    
    def test_not_a_class(self):
        """Test an identifier naming a function is rejected."""
        with pytest.raises(ModelLoadError):
            load_class("sample_models.mapped_column")


class TestModelScanner:
    """Tests for directory scanning."""
    
    def test_scan_lists_defined_classes(self, shop, logger):
        """Test scan lists defined classes."""
        scanner = ModelScanner([shop.name], base_path=shop.root, logger=logger)
        
        identifiers = scanner.scan()
        
        assert identifiers == [
            f"{shop.name}.base.Base",
            f"{shop.name}.models.Customer",
            f"{shop.name}.models.Order",
            f"{shop.name}.models.Exploding",
            f"{shop.name}.models.Timestamped",
            f"{shop.name}.models.Helper",
        ]
    
    def test_broken_module_is_skipped(self, shop, logger):
        """Test broken module is skipped."""
        scanner = ModelScanner([shop.name], base_path=shop.root, logger=logger)
        
        scanner.scan()
        
        warnings = logger.messages(LogLevel.WARNING)
        assert any("broken.py" in m and "missing optional dependency" in m for m in warnings)
    
    def test_scan_deduplicates(self, shop, logger):
        """Test scan deduplicates."""
        scanner = ModelScanner([shop.name, shop.name], base_path=shop.root, logger=logger)
        
        identifiers = scanner.scan()
        
        assert len(identifiers) == len(set(identifiers)) == 6
    
    def test_discover_filters_models(self, shop, logger):
        """Test discover filters models."""
        scanner = ModelScanner([shop.name], base_path=shop.root, logger=logger)
        
        models = scanner.discover(shop.base)
        
        assert [cls.__name__ for cls in models] == ["Customer", "Order", "Exploding"]
        assert f"Model : {shop.name}.models.Customer" in logger.messages(LogLevel.INFO)
    
    def test_absolute_directory(self, shop, logger):
        """Test absolute directory."""
        scanner = ModelScanner([shop.path], logger=logger)
        assert len(scanner.discover(shop.base)) == 3
    
    def test_missing_directory_is_skipped(self, tmp_path, logger):
        """Test missing directory is skipped."""
        scanner = ModelScanner(["does/not/exist"], base_path=tmp_path, logger=logger)
        assert scanner.scan() == []
    
    def test_file_location_raises(self, tmp_path, logger):
        """Test file location raises."""
        (tmp_path / "models.py").write_text("")
        scanner = ModelScanner(["models.py"], base_path=tmp_path, logger=logger)
        
        with pytest.raises(ScanError):
            scanner.scan()
    
    def test_non_model_directory(self, make_package, logger):
        """Test non model directory."""
        package = make_package({"helpers.py": HELPERS})
        scanner = ModelScanner([package.name], base_path=package.root, logger=logger)
        
        assert scanner.discover(package.base) == []
    
    def test_filter_models(self, shop, logger):
        """Test filter models."""
        scanner = ModelScanner([shop.name], base_path=shop.root, logger=logger)
        identifiers = scanner.scan() + [f"{shop.name}.models.Missing"]
        
        models = scanner.filter_models(identifiers, shop.base)
        
        assert [cls.__name__ for cls in models] == ["Customer", "Order", "Exploding"]
        assert any("Missing" in m for m in logger.messages(LogLevel.WARNING))


def test_errors_share_a_root():
    """Test errors share a root."""
    from model_schema.core.schema import ModelTimeoutError, SchemaError
    
    assert issubclass(ScanError, SchemaError)
    assert issubclass(ModelLoadError, SchemaError)
    assert issubclass(ModelTimeoutError, SchemaError)
