"""
teamforge:
    Deploy teams of AI assistant configuration to Claude Code, Gemini CLI and Cline.
"""

__version__ = "0.1.0"
