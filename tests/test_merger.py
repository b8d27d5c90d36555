"""
Tests for the SchemaMerger.
"""

import pytest

from model_schema.core.schema.merger import SchemaMerger, parse_annotation
from model_schema.core.schema.models import FieldType, ModelProfile, Pivot, Reference


@pytest.fixture
def merger(logger):
    return SchemaMerger(logger=logger)


class TestParseAnnotation:
    """Tests for foreign-key annotation parsing."""
    
    def test_valid(self):
        """Test parsing a well-formed annotation."""
        assert parse_annotation("owner_id>owner.id") == ("owner_id", Reference("owner", "id"))
    
    def test_malformed(self):
        """Test malformed annotations parse to None."""
        assert parse_annotation("owner_id") is None
        assert parse_annotation(">owner.id") is None
        assert parse_annotation("owner_id>") is None


class TestSchemaMerger:
    """Tests for merging profiles into entity schemas."""
    
    def test_plain_fields_in_order(self, merger):
        """Test plain fields in order."""
        profile = ModelProfile()
        profile.set_property("id", FieldType.INTEGER)
        profile.set_property("title", FieldType.STRING)
        profile.set_property("full_name", None)
        
        entity = merger.merge("Post", "app.Post", "id", profile)
        
        assert entity.name == "Post"
        assert entity.class_name == "app.Post"
        assert entity.primary_key == "id"
        assert [(f.name, f.field_type) for f in entity.fields] == [
            ("id", FieldType.INTEGER),
            ("title", FieldType.STRING),
            ("full_name", FieldType.MIXED),
        ]
        assert entity.foreign_keys == []
    
    def test_relation_links_foreign_key(self, merger):
        """Test relation links foreign key."""
        profile = ModelProfile()
        profile.set_property("id", FieldType.INTEGER)
        profile.set_property("owner_id", FieldType.INTEGER)
        profile.set_property(
            "owner", FieldType.REFERENCE, comment="owner_id>owner.id", related="app.User"
        )
        
        entity = merger.merge("Post", "app.Post", "id", profile)
        
        assert [f.name for f in entity.fields] == ["id", "owner_id"]
        owner_id = entity.get_field("owner_id")
        assert owner_id.pivot == Pivot("owner_id")
        assert owner_id.reference == Reference("owner", "id")
        assert owner_id.field_type == FieldType.INTEGER
    
    def test_missing_foreign_key_drops_link_only(self, merger, logger):
        """Test missing foreign key drops link only."""
        profile = ModelProfile()
        profile.set_property("id", FieldType.INTEGER)
        profile.set_property("owner", FieldType.REFERENCE, comment="owner_id>owner.id")
        profile.set_property("title", FieldType.STRING)
        
        entity = merger.merge("Post", "app.Post", "id", profile)
        
        assert [f.name for f in entity.fields] == ["id", "title"]
        assert entity.foreign_keys == []
        assert any("owner_id" in m for m in logger.messages())
    
    def test_relation_before_column_is_not_linked(self, merger):
        """The foreign key must already be emitted when the relation is merged."""
        profile = ModelProfile()
        profile.set_property("owner", FieldType.REFERENCE, comment="owner_id>owner.id")
        profile.set_property("owner_id", FieldType.INTEGER)
        
        entity = merger.merge("Post", "app.Post", "id", profile)
        
        assert entity.get_field("owner_id").pivot is None
    
    def test_refined_accessor_keeps_reference_type(self, merger):
        """An accessor later typed by a relation is emitted as a reference field."""
        profile = ModelProfile()
        profile.set_property("owner", None)
        profile.set_property(
            "owner", FieldType.REFERENCE, comment="owner_id>owner.id", related="app.User"
        )
        
        entity = merger.merge("Post", "app.Post", "id", profile)
        
        owner = entity.get_field("owner")
        assert owner.field_type == FieldType.REFERENCE
        assert owner.related == "app.User"
