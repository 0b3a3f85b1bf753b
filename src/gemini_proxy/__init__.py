"""
Gemini API Proxy: reverse proxy streaming vers l'API Google Generative Language.
"""

__version__ = "1.0.0"
