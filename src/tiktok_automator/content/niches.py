"""Content niches.

The set of niches is closed. Every lookup goes through Niche.parse, which
rejects unknown values instead of falling back to a default niche.
"""

from enum import Enum


class ContentError(Exception):
    """Base exception for content generation errors."""

    pass


class UnknownNicheError(ContentError, ValueError):
    """Niche value is not one of the supported niches."""

    pass


class Niche(str, Enum):
    """Supported content niches."""

    AI_TOOLS = "ai_tools"
    ONLINE_BUSINESS = "online_business"
    FACELESS_STORIES = "faceless_stories"

    @classmethod
    def parse(cls, value: "str | Niche") -> "Niche":
        """Convert a string to a Niche.

        Raises:
            UnknownNicheError: If the value is not a supported niche.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(n.value for n in cls)
            raise UnknownNicheError(f"Unknown niche '{value}'. Valid niches: {valid}") from None

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()
