"""
Repository package for data access layers.

`glacier.repositories.resources` resolves glacier resource metadata. Routes
depend on `ResourceRepositoryProtocol`, so tests can substitute any object
with an async `find_by_id(kind, resource_id)`.
"""
