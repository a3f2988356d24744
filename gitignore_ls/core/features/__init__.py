"""
Editor assistance built on document snapshots: completions and hover
"""

from .completions import CompletionCandidate, directory_prefixes, generate_completions
from .hover import HoverInfo, generate_hover

__all__ = [
    'CompletionCandidate',
    'directory_prefixes',
    'generate_completions',
    'HoverInfo',
    'generate_hover',
]
