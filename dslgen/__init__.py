"""
dslgen - Kotlin view DSL generator.

Reads JSON view descriptors and emits the Kotlin sources of a declarative
view-building DSL, using bytecode nullability annotations to type setters.
"""

__version__ = "1.0.0"
