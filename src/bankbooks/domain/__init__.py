"""Domain layer for bankbooks application.

Services are imported from their own modules; this package stays free of
imports so the database layer can load ``bankbooks.domain.entities``
without pulling in the services that depend on it.
"""
