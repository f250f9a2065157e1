"""Public façade for the app.pipeline package.

This module exposes the library analysis entrypoint. Other packages should
import pipeline behaviour from this façade instead of the internal pipeline
submodules.
"""

from .analysis import fetch_user_analysis

__all__ = [
    "fetch_user_analysis",
]
