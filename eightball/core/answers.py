"""Answer pool construction.

Pure functions only: the pool is rebuilt from a metadata snapshot on every
request and nothing here touches storage or the network.
"""

from __future__ import annotations

import random
from typing import List, Optional

from eightball.core.models import CommunityMetadata


GENERIC_ANSWERS = (
    "It is certain",
    "Reply hazy, try again",
    "Don't count on it",
    "It is decidedly so",
    "Ask again later",
    "My reply is no",
    "Without a doubt",
    "Better not tell you now",
    "My sources say no",
    "Yes definitely",
    "Cannot predict now",
    "Outlook not so good",
    "You may rely on it",
    "Concentrate and ask again",
    "Very doubtful",
    "As I see it, yes",
    "Most likely",
    "Outlook good",
    "Yes",
    "Signs point to yes",
)

COMMUNITY_TEMPLATES = (
    "The mods of r/{name} say yes",
    "According to r/{name} rules, absolutely",
    "The r/{name} community believes so",
    "Ask the r/{name} daily thread",
    "Check the r/{name} wiki first",
    "The r/{name} hivemind says no",
    "Post it in r/{name} and find out",
    "The r/{name} automod says maybe",
    "r/{name} veterans would agree",
    "That's against r/{name} guidelines",
    "r/{name} would upvote this",
    "The r/{name} FAQ has your answer",
    "Ask r/{name} in the weekly thread",
    "r/{name} mods are watching...",
    "The spirit of r/{name} says yes",
    "The r/{name} oracle has spoken: Yes!",
    "r/{name}'s collective wisdom says no",
    "The ancient scrolls of r/{name} confirm it",
    "r/{name}'s magic 8-ball network agrees",
    "The r/{name} prophecy foretells: Maybe",
    "r/{name}'s crystal ball is cloudy...",
    "The r/{name} fortune cookies say yes",
    "r/{name}'s tarot cards reveal: No",
    "The r/{name} tea leaves suggest: Definitely",
    "r/{name}'s cosmic energy says: Ask again",
    "The r/{name} universe aligns: Absolutely",
    "r/{name}'s mystical forces say: Doubtful",
    "The r/{name} spirits whisper: Yes",
    "r/{name}'s digital divination: Unclear",
    "The r/{name} algorithm predicts: Likely",
)

LARGE_COMMUNITY_TEMPLATES = (
    "With {thousands}k members, r/{name} says yes",
    "{thousands}k r/{name} users can't be wrong",
)
MEDIUM_COMMUNITY_TEMPLATE = "All {thousands}k r/{name} members agree"
RULE_INDEX_TEMPLATE = "Check rule {index} of r/{name}"
RULES_TEMPLATE = "The r/{name} rules are clear on this"

LARGE_COMMUNITY_THRESHOLD = 100_000
MEDIUM_COMMUNITY_THRESHOLD = 1_000
GENERIC_TAIL = 5


def _subscriber_answers(name: str, subscribers: Optional[int]) -> List[str]:
    if not subscribers:
        return []
    thousands = subscribers // 1000
    if subscribers > LARGE_COMMUNITY_THRESHOLD:
        return [t.format(name=name, thousands=thousands) for t in LARGE_COMMUNITY_TEMPLATES]
    if subscribers > MEDIUM_COMMUNITY_THRESHOLD:
        return [MEDIUM_COMMUNITY_TEMPLATE.format(name=name, thousands=thousands)]
    return []


def _rule_answers(
    name: str,
    rule_count: int,
    rule_index: Optional[int],
    rng: Optional[random.Random],
) -> List[str]:
    if rule_count <= 0:
        return []
    if rule_index is None:
        rule_index = (rng or random).randint(1, rule_count)
    else:
        # clamp into [1, rule_count]
        rule_index = min(max(rule_index, 1), rule_count)
    return [
        RULE_INDEX_TEMPLATE.format(index=rule_index, name=name),
        RULES_TEMPLATE.format(name=name),
    ]


def build_community_pool(
    metadata: CommunityMetadata,
    rule_index: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Community-flavored answers followed by the first generic ones.

    ``rule_index`` pins the 1-based rule number used in the rule phrase;
    when omitted it is drawn from ``rng`` (or the module generator).
    """
    name = metadata.display_name.strip() or metadata.community_id
    answers = [template.format(name=name) for template in COMMUNITY_TEMPLATES]
    answers.extend(_subscriber_answers(name, metadata.subscriber_count))
    answers.extend(_rule_answers(name, len(metadata.rules), rule_index, rng))
    answers.extend(GENERIC_ANSWERS[:GENERIC_TAIL])
    return answers


def build_pool(
    metadata: Optional[CommunityMetadata],
    rule_index: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    if metadata is None:
        return list(GENERIC_ANSWERS)
    answers = [a for a in build_community_pool(metadata, rule_index, rng) if a.strip()]
    return answers or list(GENERIC_ANSWERS)
