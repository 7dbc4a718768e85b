"""Natural-language-to-SQL backend for a MySQL sales database."""

__version__ = "1.0.0"
