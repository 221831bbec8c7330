"""Topic database with day-of-year rotation."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .niches import Niche


@dataclass(frozen=True)
class Topic:
    """A content angle within a niche."""

    niche: Niche
    angle: str
    hook_format: str
    target_audience: str


TOPIC_DATABASE: tuple[Topic, ...] = (
    # === AI TOOLS & AUTOMATION ===
    Topic(
        niche=Niche.AI_TOOLS,
        angle="AI tools that replace a whole employee",
        hook_format="This one AI tool works harder than 3 employees.",
        target_audience="Entrepreneurs and creators aged 20-35",
    ),
    Topic(
        niche=Niche.AI_TOOLS,
        angle="AI automation that makes money while you sleep",
        hook_format="I built a system that makes money while I sleep. Here's the simple part nobody talks about.",
        target_audience="Online business owners looking for passive income",
    ),
    Topic(
        niche=Niche.AI_TOOLS,
        angle="AI tool that saves 2 hours daily",
        hook_format="This 10-second AI hack saves me 2 hours every single day.",
        target_audience="Busy professionals",
    ),
    Topic(
        niche=Niche.AI_TOOLS,
        angle="AI tools for content creators",
        hook_format="If you're still editing videos manually, watch this.",
        target_audience="Aspiring TikTok creators",
    ),
    Topic(
        niche=Niche.AI_TOOLS,
        angle="AI coding assistants",
        hook_format="This AI writes better code than junior developers. And it's getting scary good.",
        target_audience="Developers and technical founders",
    ),
    # === ONLINE BUSINESS / MAKE MONEY ===
    Topic(
        niche=Niche.ONLINE_BUSINESS,
        angle="Side hustles you can start with a laptop in 1 hour",
        hook_format="If you have a laptop and 1 free hour a day, you can start this today.",
        target_audience="Employees wanting extra income",
    ),
    Topic(
        niche=Niche.ONLINE_BUSINESS,
        angle="Mistakes keeping your business stuck at $0-1k/month",
        hook_format="If you're still broke after watching money videos, this is why.",
        target_audience="Beginner online entrepreneurs",
    ),
    Topic(
        niche=Niche.ONLINE_BUSINESS,
        angle="How to validate a business idea in 48 hours",
        hook_format="Most people waste months on bad ideas. Here's how to test yours in 2 days.",
        target_audience="First-time founders",
    ),
    Topic(
        niche=Niche.ONLINE_BUSINESS,
        angle="The real cost of starting an online business",
        hook_format="They say you need $10k to start. I did it with $47.",
        target_audience="People afraid to start",
    ),
    Topic(
        niche=Niche.ONLINE_BUSINESS,
        angle="Newsletter business model breakdown",
        hook_format="The easiest online business right now? Newsletters. Here's why.",
        target_audience="Writers and solopreneurs",
    ),
    # === FACELESS STORIES ===
    Topic(
        niche=Niche.FACELESS_STORIES,
        angle="From broke to $10k/month in 90 days",
        hook_format="He was broke 90 days ago. Now he makes $10k/month. Here's what changed.",
        target_audience="Young adults seeking motivation",
    ),
    Topic(
        niche=Niche.FACELESS_STORIES,
        angle="Creator who turned one viral video into a full business",
        hook_format="One viral TikTok changed his entire life. Here's the part nobody saw coming.",
        target_audience="Aspiring creators",
    ),
    Topic(
        niche=Niche.FACELESS_STORIES,
        angle="Behind the scenes of a 6-figure online business",
        hook_format="Everyone sees the results. Nobody talks about the 2 AM breakdowns.",
        target_audience="Entrepreneurs in the grind phase",
    ),
    Topic(
        niche=Niche.FACELESS_STORIES,
        angle="The truth about quitting your 9-5",
        hook_format="I quit my job 6 months ago. Here's what they don't tell you.",
        target_audience="Employees thinking about quitting",
    ),
    Topic(
        niche=Niche.FACELESS_STORIES,
        angle="The creator who cracked the algorithm",
        hook_format="She posted for 6 months with 0 views. Then she changed one thing.",
        target_audience="Struggling creators",
    ),
)


def day_of_year(today: Optional[date] = None) -> int:
    """Day of the year, 1-366."""
    return (today or date.today()).timetuple().tm_yday


def topic_for_day(day: Optional[int] = None) -> Topic:
    """Rotate through the database, one topic per day.

    Args:
        day: Day of the year. Defaults to today.
    """
    if day is None:
        day = day_of_year()
    return TOPIC_DATABASE[day % len(TOPIC_DATABASE)]


def topics_by_niche(niche: "Niche | str") -> list[Topic]:
    """All topics for one niche.

    Raises:
        UnknownNicheError: If the niche is not supported.
    """
    niche = Niche.parse(niche)
    return [topic for topic in TOPIC_DATABASE if topic.niche == niche]
