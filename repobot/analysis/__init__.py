"""Documentation analysis shared by documentation-generating passes."""

from .elements import BEHAVIOR, ELEMENT, DocIndex, DocSymbol, ElementAnalyzer

__all__ = ["BEHAVIOR", "ELEMENT", "DocIndex", "DocSymbol", "ElementAnalyzer"]
