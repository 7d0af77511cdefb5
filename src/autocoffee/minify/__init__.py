"""Minifier services — abstract interface and concrete providers."""

from autocoffee.minify.base import BaseMinifier
from autocoffee.minify.rjs import RJSMinMinifier
from autocoffee.minify.terser import TerserMinifier
from autocoffee.registry import default_registry

__all__ = ["BaseMinifier", "RJSMinMinifier", "TerserMinifier"]

# Register built-in minifiers
default_registry.register("minifier", "rjsmin", lambda cfg: RJSMinMinifier(cfg))
default_registry.register("minifier", "terser", lambda cfg: TerserMinifier(cfg))
