"""storepulse: operational diagnostics console for e-commerce platform hosts."""

__version__ = "1.0.0"
