"""Vector and matrix types, PNG chunk utilities, ICC parsing and colour-space conversion."""

__version__ = "0.1.0"
__all__ = ["vectors", "icc", "colormatrix", "chunks", "colorspace"]