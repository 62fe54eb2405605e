import re
from typing import Any, Callable, Optional

import openai

from herald.shared.logging import get_logger
from herald.shared.utils import strip_code_fences
from herald.tiers.capabilities import ProfileTier
from .schemas import PolishTone

logger = get_logger("ai.polish")


class PolishError(Exception):
    pass


class PolishRateLimited(PolishError):
    pass


class PolishContentRejected(PolishError):
    pass


class PolishUnavailable(PolishError):
    pass


SYSTEM = (
    "You are an expert biography writer for Icons Herald, a premium digital archive platform. "
    "Polish and enhance biographical content while keeping it authentic and factually accurate. "
    "RULES: Keep every fact from the original. Do not add fictional achievements or exaggerate claims. "
    "Improve clarity and flow, use active voice, and focus on the impact of accomplishments. "
    "Keep the result between 150 and 500 words."
)

TIER_GUIDANCE = {
    ProfileTier.RISING: (
        "This is a Rising profile: emphasize potential, growth trajectory and emerging impact. "
        "Highlight recent achievements and future promise in dynamic, forward-looking language."
    ),
    ProfileTier.ELITE: (
        "This is an Elite profile: emphasize established expertise, leadership and measurable impact. "
        "Highlight career milestones and industry recognition in confident, authoritative language."
    ),
    ProfileTier.LEGACY: (
        "This is a Legacy profile: emphasize historical significance and lasting influence. "
        "Show how the work shaped its field or society, in reverent, monumental language."
    ),
}

TONE_GUIDANCE = {
    PolishTone.PROFESSIONAL: "Use formal, business-appropriate language with industry terminology.",
    PolishTone.CASUAL: "Use approachable, conversational language while maintaining respect.",
    PolishTone.FORMAL: "Use elevated, academic language with sophisticated vocabulary.",
}

_LABEL_RE = re.compile(r"^(enhanced\s+)?biography:\s*", re.IGNORECASE)
_BOLD_HEADER_RE = re.compile(r"^\*\*.*?\*\*\s*")
_MD_HEADER_RE = re.compile(r"^#+\s*", re.MULTILINE)


def build_system_prompt(tier: ProfileTier, tone: PolishTone) -> str:
    return (
        f"{SYSTEM}\n\n{TIER_GUIDANCE[tier]}\n\nTone: {TONE_GUIDANCE[tone]}\n\n"
        "Return only the polished biography text, without any additional commentary or formatting."
    )


def build_user_prompt(bio: str, tier: ProfileTier, tone: PolishTone) -> str:
    return (
        f"Please polish and enhance the following biography for a {tier.value} tier profile "
        f"with a {tone.value} tone:\n\nOriginal Biography:\n{bio}\n\nEnhanced Biography:"
    )


def clean_reply(text: str) -> str:
    s = strip_code_fences(text)
    s = _MD_HEADER_RE.sub("", s)
    s = _BOLD_HEADER_RE.sub("", s)
    s = _LABEL_RE.sub("", s)
    return s.strip()


class BioPolisher:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", *, client_factory: Optional[Callable[[str], Any]] = None):
        self.api_key = api_key
        self.model = model
        self._client_factory = client_factory or (lambda key: openai.OpenAI(api_key=key))

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _complete(self, system: str, user: str) -> str:
        client = self._client_factory(self.api_key)
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        # Prefer Responses API for broader model support
        try:
            resp = client.responses.create(model=self.model, input=messages)
            text = getattr(resp, "output_text", None) or ""
            if text:
                return text
        except openai.RateLimitError:
            raise
        except openai.APIError as e:
            logger.info(f"Responses API failed ({type(e).__name__}), trying chat.completions")
        chat = client.chat.completions.create(model=self.model, messages=messages, temperature=0.3)
        return chat.choices[0].message.content or ""

    def polish(self, bio: str, *, tone: PolishTone = PolishTone.PROFESSIONAL, tier: ProfileTier = ProfileTier.ELITE) -> str:
        if not self.available:
            logger.warning("GPT_API_KEY not set; bio polishing unavailable.")
            raise PolishUnavailable("AI service not configured")

        tone, tier = PolishTone(tone), ProfileTier(tier)
        try:
            text = self._complete(build_system_prompt(tier, tone), build_user_prompt(bio, tier, tone))
        except openai.RateLimitError as e:
            logger.warning(f"AI polish rate limited: {type(e).__name__}")
            raise PolishRateLimited("AI service rate limit exceeded") from e
        except openai.BadRequestError as e:
            logger.warning(f"AI polish rejected: {type(e).__name__}")
            if "content" in str(e).lower():
                raise PolishContentRejected("Content violates AI usage policies") from e
            raise PolishError(f"AI processing failed: {type(e).__name__}") from e
        except openai.OpenAIError as e:
            logger.warning(f"AI polish failed: {type(e).__name__}")
            raise PolishError(f"AI processing failed: {type(e).__name__}") from e

        polished = clean_reply(text)
        if not polished:
            raise PolishError("Failed to extract polished bio from AI response")
        return polished
