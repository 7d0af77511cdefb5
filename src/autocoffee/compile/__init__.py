"""Compiler services — abstract interface and the CoffeeScript CLI wrapper."""

from autocoffee.compile.base import BaseCompiler
from autocoffee.compile.coffee import CoffeeScriptCompiler
from autocoffee.registry import default_registry

__all__ = ["BaseCompiler", "CoffeeScriptCompiler"]

# Register built-in compilers
default_registry.register("compiler", "coffee", lambda cfg: CoffeeScriptCompiler(cfg))
