"""Token-stream tools for macro-style code generation, with callable and boolean helpers."""

__version__ = "1.5.4"

__all__ = [
    "bools",
    "callable",
    "item_parsing",
    "list_generation",
    "macro_parsing",
    "macro_utils",
    "splitting_generics",
    "tokens",
]