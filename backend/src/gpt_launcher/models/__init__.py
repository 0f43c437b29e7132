from .gpt import CustomGpt

__all__ = [
    "CustomGpt",
]
