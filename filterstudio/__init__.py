"""
Filter Studio
Photo style filters backed by an AI image-editing API.
"""
__version__ = "1.0.0"
