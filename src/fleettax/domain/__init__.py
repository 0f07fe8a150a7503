"""Domain layer for fleettax: entities, the IFTA engine and services.

Submodules are imported explicitly (``from fleettax.domain.ifta import
IftaService``); the package itself re-exports nothing so the database layer
can import entities without pulling in the services.
"""
