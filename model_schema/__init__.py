"""
Model Schema

Derives a generic, introspectable description of an application's data
schema (entities, typed fields, relationships) from its SQLAlchemy models,
for consumption by administration and API layers.
"""

__version__ = "1.0.0"
__author__ = "Model Schema Team"
