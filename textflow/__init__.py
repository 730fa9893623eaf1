"""Layout of shaped text: line breaking, bidi reordering, alignment and cluster navigation."""

__version__ = "0.1.0"