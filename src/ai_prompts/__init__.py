"""ai-prompts - Generate AI prompts from reusable templates.

Discovers prompt templates from a directory, collects typed parameters
interactively and renders the final prompt text.
"""

__version__ = "1.0.0"
