"""NPC Control: autonomous decisions for NPCs and enemies in tabletop RPG sessions."""

__version__ = "0.1.0"
