"""
bili-dl: bilibili video extractor and downloader
"""

__version__ = "1.0.0"
