"""Rule-based assistant replies standing in for a language model."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import structlog

from ..domain.models import DateRange, format_long, format_short

logger = structlog.get_logger()

# Quick-start prompts offered on an empty conversation
SUGGESTIONS = ("Beach vacation", "City adventure", "Mountain hiking")


def suggestion_prompt(suggestion: str) -> str:
    return f"I want to plan a {suggestion.lower()}"


def _beach_reply(dates: DateRange) -> str:
    clause = ""
    if dates.start is not None:
        end = format_short(dates.end) if dates.end is not None else "..."
        clause = f" ({format_short(dates.start)} - {end})"
    return f"""🏖️ A beach getaway sounds wonderful! Based on your dates{clause}, I'd recommend:

**Top Beach Destinations:**
• Maldives - Perfect for luxury overwater villas
• Bali, Indonesia - Great mix of beaches and culture
• Cancún, Mexico - Beautiful Caribbean waters

Would you like me to elaborate on any of these destinations?"""


def _city_reply(dates: DateRange) -> str:
    return """🏙️ City adventures are always exciting! Here are some recommendations:

**Must-Visit Cities:**
• Tokyo, Japan - Blend of tradition and innovation
• Barcelona, Spain - Art, architecture, and beaches
• New York City - The city that never sleeps

What kind of city experience interests you most - cultural, culinary, or nightlife?"""


def _adventure_reply(dates: DateRange) -> str:
    return """🏔️ Adventure awaits! For thrill-seekers, I suggest:

**Adventure Destinations:**
• Queenstown, New Zealand - Adventure capital
• Costa Rica - Rainforests and zip-lining
• Swiss Alps - Hiking and stunning views

How intense of an adventure are you looking for?"""


def _clarifying_reply(dates: DateRange) -> str:
    clause = ""
    if dates.start is not None:
        clause += f" from {format_long(dates.start)}"
    if dates.end is not None:
        clause += f" to {format_long(dates.end)}"
    return f"""Great! I'd love to help you plan your trip{clause}.

To give you the best recommendations, could you tell me:
• What type of experience are you looking for? (relaxation, adventure, culture)
• Your budget range
• Any specific activities you want to include

Feel free to describe your dream trip in detail! 🌍✨"""


@dataclass(frozen=True)
class ReplyRule:
    """Keyword rule: the first rule with a keyword in the utterance wins."""

    name: str
    keywords: Tuple[str, ...]
    render: Callable[[DateRange], str]

    def matches(self, utterance: str) -> bool:
        return any(keyword in utterance for keyword in self.keywords)


DEFAULT_RULES = (
    ReplyRule("beach", ("beach", "tropical"), _beach_reply),
    ReplyRule("city", ("city", "urban"), _city_reply),
    ReplyRule("adventure", ("adventure", "hiking"), _adventure_reply),
)


class ResponseGenerator:
    """Deterministic classifier mapping an utterance to a templated reply."""

    def __init__(self, rules: Tuple[ReplyRule, ...] = DEFAULT_RULES,
                 fallback: Callable[[DateRange], str] = _clarifying_reply):
        self.rules: List[ReplyRule] = list(rules)
        self.fallback = fallback

    def _match(self, utterance: str) -> Optional[ReplyRule]:
        lowered = utterance.lower()
        for rule in self.rules:
            if rule.matches(lowered):
                return rule
        return None

    def classify(self, utterance: str) -> Optional[str]:
        """Name of the rule the utterance triggers, or None for the fallback."""
        rule = self._match(utterance)
        return rule.name if rule else None

    def generate(self, utterance: str, date_context: Optional[DateRange] = None) -> str:
        dates = date_context if date_context is not None else DateRange()
        rule = self._match(utterance)
        if rule is None:
            logger.debug("reply_rule_fallback")
            return self.fallback(dates)
        logger.debug("reply_rule_matched", rule=rule.name)
        return rule.render(dates)
