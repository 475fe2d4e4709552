"""
Old School RuneScape skill data used when formatting notifications.

The icon table is keyed by the skill name exactly as it appears in the
game's level-up message.
"""

from typing import Dict

FALLBACK_ICON = "❓"

SKILL_ICONS: Dict[str, str] = {
    # Free-to-play
    "Attack": "🗡️",
    "Strength": "💪",
    "Defence": "🛡️",
    "Ranged": "🏹",
    "Prayer": "🙏",
    "Magic": "🧙‍♂️",
    "Runecrafting": "🔮",
    "Hitpoints": "❤️",
    "Crafting": "🛠️",
    "Mining": "⛏️",
    "Smithing": "🔨",
    "Fishing": "🎣",
    "Cooking": "🥣",
    "Firemaking": "🔥",
    "Woodcutting": "🌳",

    # Members
    "Agility": "🏃‍♂️",
    "Herblore": "🌿",
    "Thieving": "💰",
    "Fletching": "🎯",
    "Slayer": "👹",
    "Farming": "🌱",
    "Construction": "🏠",
    "Hunter": "🐺",

    # Special
    "Combat": "⚔️",
}


def get_skill_icon(skill: str) -> str:
    """
    Get the icon for a skill name.

    Args:
        skill: Skill name from the level-up message

    Returns:
        Icon for the skill, or the fallback icon for unknown names
    """
    return SKILL_ICONS.get(skill, FALLBACK_ICON)

