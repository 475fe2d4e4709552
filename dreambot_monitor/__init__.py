"""
DreamBot Log Monitor

Tails DreamBot log files, recognises chat, level-up, quest, break, death and
valuable-drop lines, and forwards them to Discord webhooks.
"""

__version__ = "0.1.0"
__author__ = "DreamBot Monitor Team"
