"""autocoffee — compile CoffeeScript on save into workspace-relative outputs."""

__version__ = "0.3.0"
