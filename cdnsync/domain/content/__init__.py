"""
Content Domain Module

Shapes of the content events this service reacts to, and the interface
to the content store that owns documents and theme assets.
"""
