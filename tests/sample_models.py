"""
Models used across the test suite.
"""

import functools

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, mapped_column, relationship

from model_schema.core.schema import HasRelations


class Base(DeclarativeBase):
    pass


class User(HasRelations, Base):
    __tablename__ = "users"

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(100))
    email = mapped_column(Text)
    is_admin = mapped_column(Boolean)
    balance = mapped_column(Numeric(10, 2))
    score = mapped_column(Float)
    created_at = mapped_column(DateTime)
    birthday = mapped_column(Date)
    settings = mapped_column(JSON)

    def get_full_name_attribute(self):
        return self.name

    def set_full_name_attribute(self, value):
        self.name = value

    def getFullNameAttribute(self):
        return self.name

    def scope_active(self, query):
        return query

    def scope_named(self, query, name, exact=False):
        return query

    @staticmethod
    def scope_verified(query):
        return query

    def posts(self):
        return self.has_many(Post)

    def profile(self):
        return self.has_one(Profile)


class Profile(Base):
    __tablename__ = "profiles"

    id = mapped_column(Integer, primary_key=True)
    user_id = mapped_column(ForeignKey("users.id"))
    bio = mapped_column(Text)


class Post(HasRelations, Base):
    __tablename__ = "posts"
    __dates__ = ["published_at"]
    __accessors__ = ["display_label"]
    __scopes__ = {"recent": ["days"]}

    id = mapped_column(Integer, primary_key=True)
    title = mapped_column(String(200))
    body = mapped_column(Text)
    owner_id = mapped_column(ForeignKey("users.id"))
    published_at = mapped_column(DateTime)
    created_at = mapped_column(DateTime)
    updated_at = mapped_column(DateTime)

    def owner(self):
        return self.belongs_to(User)

    def tags(self):
        return self.belongs_to_many(Tag)

    def comments(self):
        return self.morph_many(Comment, "commentable")


class Tag(Base):
    __tablename__ = "tags"

    id = mapped_column(Integer, primary_key=True)
    label = mapped_column(String(50))


class Comment(HasRelations, Base):
    __tablename__ = "comments"
    __timestamps__ = False

    id = mapped_column(Integer, primary_key=True)
    body = mapped_column(Text)
    commentable_id = mapped_column(Integer)
    commentable_type = mapped_column(String(50))

    def commentable(self):
        return self.morph_to()


class Author(Base):
    __tablename__ = "authors"

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(100))

    books = relationship("Book", back_populates="author")


class Book(Base):
    __tablename__ = "books"

    id = mapped_column(Integer, primary_key=True)
    title = mapped_column(String(200))
    author_id = mapped_column(ForeignKey("authors.id"))

    author = relationship("Author", back_populates="books")


class Invoice(HasRelations, Base):
    __tablename__ = "invoices"

    id = mapped_column(Integer, primary_key=True)
    customer_id = mapped_column(Integer)

    def customer(self):
        raise RuntimeError("customer lookup unavailable")
        return self.belongs_to(User)


def belongs_to_user():
    def relation(self):
        return self.belongs_to(User)
    return relation


class Article(HasRelations, Base):
    __tablename__ = "articles"

    id = mapped_column(Integer, primary_key=True)
    author_id = mapped_column(ForeignKey("users.id"))
    reviewer_id = mapped_column(ForeignKey("users.id"))

    author = belongs_to_user()

    @functools.lru_cache(maxsize=None)
    def reviewer(self):
        return self.belongs_to(User)
