"""
Manuscript Critic
Structured, scored manuscript critique built on an external text-completion model.
"""

__version__ = "1.0.0"

from .critic import ManuscriptCritic, create_critic

__all__ = ["ManuscriptCritic", "create_critic", "__version__"]
