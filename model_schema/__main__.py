"""
Entry point for running the schema tool as a module.

Usage: python -m model_schema <command> [options]
"""

from model_schema.cli import app

if __name__ == "__main__":
    app()
