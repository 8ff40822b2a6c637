"""
Report export for FrameCount.

Formats estimates for display and renders them as PDF documents.
"""
