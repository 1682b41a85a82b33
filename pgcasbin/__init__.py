"""PostgreSQL storage for Casbin-style policy rules: rule model, repository and adapters."""

__version__ = "0.1.0"