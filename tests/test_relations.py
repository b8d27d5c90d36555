"""
Tests for the relation constructors.
"""

from model_schema.core.schema.relations import Relation, RelationKind, resolving

from sample_models import Comment, Post, Profile, Tag, User


class TestRelationKind:
    """Tests for RelationKind."""
    
    def test_many_valued(self):
        """Test which relation kinds are many-valued."""
        assert RelationKind.HAS_MANY.is_many
        assert RelationKind.HAS_MANY_THROUGH.is_many
        assert RelationKind.BELONGS_TO_MANY.is_many
        assert RelationKind.MORPH_MANY.is_many
        assert RelationKind.MORPH_TO_MANY.is_many
    
    def test_single_valued(self):
        """Test which relation kinds are single-valued."""
        assert not RelationKind.BELONGS_TO.is_many
        assert not RelationKind.HAS_ONE.is_many
        assert not RelationKind.MORPH_ONE.is_many
        assert not RelationKind.MORPH_TO.is_many


class TestHasRelations:
    """Tests for the default keys of each constructor."""
    
    def test_belongs_to(self):
        """Test belongs_to default keys and annotation."""
        relation = Post().owner()
        
        assert isinstance(relation, Relation)
        assert relation.kind == RelationKind.BELONGS_TO
        assert relation.name == "owner"
        assert relation.related is User
        assert relation.foreign_key == "owner_id"
        assert relation.other_key == "id"
        assert relation.annotation == "owner_id>owner.id"
    
    def test_belongs_to_explicit_keys(self):
        """Test belongs to explicit keys."""
        relation = Post().belongs_to(User, foreign_key="author_id", relation="author")
        
        assert relation.name == "author"
        assert relation.annotation == "author_id>author.id"
    
    def test_has_one_qualifies_foreign_key(self):
        """Test has one qualifies foreign key."""
        relation = User().profile()
        
        assert relation.kind == RelationKind.HAS_ONE
        assert relation.related is Profile
        assert relation.foreign_key == "profiles.user_id"
        assert relation.other_key == "id"
    
    def test_has_many(self):
        """Test has_many default keys."""
        relation = User().posts()
        
        assert relation.kind == RelationKind.HAS_MANY
        assert relation.name == "posts"
        assert relation.foreign_key == "posts.user_id"
    
    def test_belongs_to_many_default_table(self):
        """Test belongs to many default table."""
        relation = Post().tags()
        
        assert relation.kind == RelationKind.BELONGS_TO_MANY
        assert relation.related is Tag
        assert relation.foreign_key == "post_tag.post_id"
        assert relation.other_key == "post_tag.tag_id"
    
    def test_morph_to(self):
        """Test morph_to default keys."""
        relation = Comment().commentable()
        
        assert relation.kind == RelationKind.MORPH_TO
        assert relation.related is None
        assert relation.foreign_key == "commentable_id"
        assert relation.morph_type == "commentable_type"
        assert relation.annotation == "commentable_id>commentable.id"
    
    def test_morph_many(self):
        """Test morph_many default keys."""
        relation = Post().comments()
        
        assert relation.kind == RelationKind.MORPH_MANY
        assert relation.foreign_key == "comments.commentable_id"
        assert relation.morph_type == "commentable_type"
    
    def test_morph_one(self):
        """Test morph_one default keys."""
        relation = Post().morph_one(Comment, "commentable")
        
        assert relation.kind == RelationKind.MORPH_ONE
        assert relation.related is Comment
        assert relation.foreign_key == "comments.commentable_id"
    
    def test_has_many_through(self):
        """Test has_many_through default keys."""
        relation = User().has_many_through(Comment, Post)
        
        assert relation.kind == RelationKind.HAS_MANY_THROUGH
        assert relation.foreign_key == "posts.user_id"
        assert relation.other_key == "post_id"
    
    def test_morph_to_many(self):
        """Test morph_to_many default keys."""
        relation = Post().morph_to_many(Tag, "taggable")
        
        assert relation.kind == RelationKind.MORPH_TO_MANY
        assert relation.foreign_key == "taggables.taggable_id"
        assert relation.other_key == "taggables.tag_id"
    
    def test_resolving_names_the_relation(self):
        """Test the resolved method name overrides the calling code's name."""
        with resolving("writer"):
            relation = Post().belongs_to(User)
        
        assert relation.name == "writer"
        assert relation.foreign_key == "writer_id"
        assert Post().belongs_to(User, relation="owner").name == "owner"
