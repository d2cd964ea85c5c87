"""QuestLog - track your game collection against the IGDB catalog"""

__version__ = "1.0.0"
