"""gimtex: flatten a source tree into a single LLM-ready text payload."""

__version__ = "1.0.0"
