"""keysheet: play compact key-press sheets through the host keyboard."""

__version__ = "0.1.0"
