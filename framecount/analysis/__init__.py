"""
Image analysis for FrameCount.

Extracts shot candidates from screenshots of shot folder listings.
"""

from .openai_client import ShotImageAnalyzer

__all__ = ["ShotImageAnalyzer"]
