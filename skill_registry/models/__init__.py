from skill_registry.models.category import Category
from skill_registry.models.parameter import Parameter
from skill_registry.models.skill import Skill

__all__ = [
    "Category",
    "Skill",
    "Parameter",
]
