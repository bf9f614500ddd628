"""
Case review backend

Tracks client-submitted account-change cases through the
client -> OKW -> CDD review workflow.
"""

__version__ = "1.0.0"
