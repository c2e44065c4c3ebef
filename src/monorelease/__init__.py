"""Release planning for monorepos of independently versioned Python packages."""

from __future__ import annotations

__version__ = "0.1.0"
