"""ChainGuardian: dependency risk assessment and signed SBOMs for software supply chains."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
