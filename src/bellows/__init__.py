"""Bellows flat-pattern geometry: parameters, generators and drawing primitives."""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "AffineTransform",
    "BellowsParameters",
    "BoundsAccumulator",
    "DEFAULT_PARAMETERS",
    "Diagram",
    "FocalGeometryInput",
    "GenerationResult",
    "Group",
    "Intersection",
    "IntersectionKind",
    "Line",
    "Mode",
    "PageSize",
    "Polyline",
    "Text",
    "ViewBox",
    "clamp_parameters",
    "generate",
    "intersect",
    "ray_from",
    "slope",
]

_ATTRIBUTE_MODULES: dict[str, str] = {
    "AffineTransform": ".geometry",
    "BoundsAccumulator": ".geometry",
    "Intersection": ".geometry",
    "IntersectionKind": ".geometry",
    "intersect": ".geometry",
    "ray_from": ".geometry",
    "slope": ".geometry",
    "BellowsParameters": ".params",
    "DEFAULT_PARAMETERS": ".params",
    "FocalGeometryInput": ".params",
    "Mode": ".params",
    "PageSize": ".params",
    "clamp_parameters": ".params",
    "Diagram": ".primitives",
    "Group": ".primitives",
    "Line": ".primitives",
    "Polyline": ".primitives",
    "Text": ".primitives",
    "ViewBox": ".primitives",
    "GenerationResult": ".assembler",
    "generate": ".assembler",
}


def __getattr__(name: str):
    try:
        module_name = _ATTRIBUTE_MODULES[name]
    except KeyError as exc:
        raise AttributeError(f"module 'bellows' has no attribute {name!r}") from exc
    module = import_module(module_name, __name__)
    value = getattr(module, name)
    globals()[name] = value
    return value
