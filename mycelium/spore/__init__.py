"""
Spores - Identity capabilities that create and sign Mycelium
"""

from .base import Spore
from .key_spore import KeySpore, PublicSpore, SPOREPRINT_PREFIX

__all__ = ['Spore', 'KeySpore', 'PublicSpore', 'SPOREPRINT_PREFIX']
