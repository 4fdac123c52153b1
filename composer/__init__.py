"""Context Composer: tone-aware rewriting on a local language model."""

__version__ = "0.1.0"
