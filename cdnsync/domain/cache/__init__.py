"""
Cache Domain Module

Domain model for CDN cache invalidation and warming.
Contains value objects, the registry entity, repository interfaces,
and domain services.
"""
