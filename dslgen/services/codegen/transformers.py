"""
Attribute transformer rules.

A transformer only applies when the attribute's value type matches what the
rule expects; otherwise the attribute keeps its plain setter.
"""

from __future__ import annotations

from ...models.descriptor import AttrModel, DslTransformer

FLOAT = "kotlin.Float"
INT = "kotlin.Int"


def pixel_to_dip_applies(attr: AttrModel) -> bool:
    """Float pixel sizes are exposed as ``Dip`` in the DSL and converted back on set."""
    return attr.has_transformer(DslTransformer.FLOAT_PIXEL_TO_DIP_SIZE) and attr.type.name == FLOAT


def requires_api_21(attr: AttrModel) -> bool:
    return attr.has_transformer(DslTransformer.REQUIRES_API_21)
