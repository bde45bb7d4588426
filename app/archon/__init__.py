"""archon - Game save snapshot manager.

Back up and restore a game's save data and configuration across native,
Wine and Proton installations.
"""

__version__ = "0.1.0"
