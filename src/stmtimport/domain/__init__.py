"""Domain layer for stmtimport.

Services are imported from their own modules (for example
``stmtimport.domain.statement_import``) so that the parsers and utilities
can depend on entities and errors without importing the services.
"""
