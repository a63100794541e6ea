"""
Profile extraction and advisor replies using OpenAI chat models
"""
from openai import OpenAI
from typing import Any, Dict, List, Mapping, Optional
from datetime import date
import json
import logging
import re

from partnur.app.config import settings
from partnur.app.services.advisor_tips import generate_follow_up_suggestions, get_seasonal_tip

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "I'm having trouble processing your request right now. Please try again in a moment."

# Profile fields echoed into the log as the context a reply was based on
CONTEXT_FIELDS = ["business_type", "location_city", "monthly_revenue",
                  "peak_hours", "challenges", "goals", "platforms_used"]

EXTRACTION_PROMPT = """You are an information extraction expert for Indian small business profiles.

Current user profile: {profile}

User message: "{message}"

Extract ONLY NEW information that can update the user profile. Return a JSON object with only the fields that have new information.

Available fields to extract:
- business_type (e.g., "salon", "restaurant", "grocery store")
- location_city, location_state
- monthly_revenue (number in rupees)
- peak_hours (array like ["09:00-12:00", "18:00-21:00"])
- peak_days (array like ["Saturday", "Sunday"])
- top_products (array of product/service names)
- staff_count (number)
- staff_roles (array like ["Manager", "Helper"])
- supplier_name, inventory_source (text)
- payment_methods (array like ["Cash", "UPI", "Card"])
- ad_channels (array like ["WhatsApp", "Facebook", "Flyers"])
- platforms_used (array like ["Zomato", "Swiggy", "Meesho"])
- past_campaigns (array of campaign descriptions)
- goals (array like ["increase sales", "hire staff"])
- challenges (array like ["low footfall", "competition"])
- pricing_model ("fixed", "seasonal", "discount-based")

Examples:
- "I run a salon in Kanpur" -> {{"business_type": "salon", "location_city": "Kanpur"}}
- "I earn around 80k per month" -> {{"monthly_revenue": 80000}}
- "I get my stock from Meesho" -> {{"platforms_used": ["Meesho"], "inventory_source": "Meesho"}}
- "Business is good on weekends" -> {{"peak_days": ["Saturday", "Sunday"]}}

Return only valid JSON, no explanations:"""

ADVISOR_PROMPT = """You are Partnur, a friendly AI business advisor for Indian small business owners (MSMEs). You're like a knowledgeable "business chacha" who gives practical, actionable advice.

PERSONALITY:
- Warm, supportive, and encouraging
- Use simple language with occasional Hindi/business terms
- Give specific, actionable advice, not generic tips
- Ask follow-up questions to understand their situation better
- Be empathetic to the challenges of running a small business in India

ADVICE STYLE:
- Focus on low-cost, practical solutions
- Consider Indian market conditions, festivals, local customs
- Suggest specific tools, platforms, and strategies popular in India
- Always consider their current resources and constraints
- Give step-by-step guidance when possible{context}

Respond in a conversational, helpful manner. If you need more information to give better advice, ask specific questions."""


def parse_extraction_output(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the extraction model's reply into a dict

    Accepts bare JSON or JSON wrapped in a markdown code fence. Anything that
    is not a JSON object yields {}.
    """
    if not text:
        return {}
    cleaned = text.strip()
    fenced = re.search(r"```(?:json)?\s*(.*?)```", cleaned, re.DOTALL)
    if fenced:
        cleaned = fenced.group(1).strip()
    try:
        parsed = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Extraction output is not valid JSON: {cleaned[:200]}")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"Extraction output is not a JSON object: {type(parsed).__name__}")
        return {}
    return parsed


def _join(values) -> str:
    return ", ".join(str(v) for v in values)


def build_business_context(profile: Mapping[str, Any]) -> str:
    """Describe the known business facts in one paragraph"""
    parts = []

    if profile.get("business_type"):
        parts.append(f"The user runs a {profile['business_type']}")
    if profile.get("location_city"):
        state = f", {profile['location_state']}" if profile.get("location_state") else ""
        parts.append(f"located in {profile['location_city']}{state}")
    if profile.get("monthly_revenue"):
        revenue = profile["monthly_revenue"]
        revenue_text = f"{revenue:,}" if isinstance(revenue, int) else str(revenue)
        parts.append(f"with monthly revenue of ₹{revenue_text}")

    if profile.get("peak_hours"):
        parts.append(f"Peak hours: {_join(profile['peak_hours'])}")
    if profile.get("peak_days"):
        parts.append(f"Busy days: {_join(profile['peak_days'])}")
    if profile.get("staff_count"):
        parts.append(f"Staff: {profile['staff_count']} people")

    if profile.get("platforms_used"):
        parts.append(f"Uses: {_join(profile['platforms_used'])}")
    if profile.get("ad_channels"):
        parts.append(f"Advertises on: {_join(profile['ad_channels'])}")

    if profile.get("goals"):
        parts.append(f"Goals: {_join(profile['goals'])}")
    if profile.get("challenges"):
        parts.append(f"Challenges: {_join(profile['challenges'])}")

    return ". ".join(parts)


class AIService:
    """OpenAI-backed extraction and response generation"""

    def __init__(self, client: Optional[OpenAI] = None, api_key: Optional[str] = None):
        if client is not None:
            self.client = client
        else:
            api_key = api_key if api_key is not None else settings.get_openai_api_key()
            if api_key:
                self.client = OpenAI(
                    api_key=api_key,
                    timeout=settings.OPENAI_TIMEOUT_SECONDS,
                    max_retries=settings.OPENAI_MAX_RETRIES,
                )
            else:
                logger.warning("AIService: No API key provided, extraction and replies will fall back")
                self.client = None

        self.extraction_model = settings.EXTRACTION_MODEL
        self.response_model = settings.RESPONSE_MODEL
        logger.info(f"AIService using extraction model: {self.extraction_model}, response model: {self.response_model}")

    def _require_client(self) -> OpenAI:
        if self.client is None:
            raise RuntimeError("OpenAI client is not configured")
        return self.client

    def extract_profile_info(self, message: str, current_profile: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Ask the model which profile fields the message reveals

        Returns:
            Raw (unfiltered) field mapping; {} when the reply is not a JSON object

        Raises:
            openai.OpenAIError / RuntimeError when the model cannot be reached
        """
        client = self._require_client()
        prompt = EXTRACTION_PROMPT.format(
            profile=json.dumps(dict(current_profile), indent=2, default=str, ensure_ascii=False),
            message=message,
        )
        response = client.chat.completions.create(
            model=self.extraction_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.EXTRACTION_TEMPERATURE,
            max_tokens=settings.EXTRACTION_MAX_TOKENS,
        )
        return parse_extraction_output(response.choices[0].message.content)

    def build_system_prompt(self, profile: Mapping[str, Any], seasonal_tip: Optional[str] = None) -> str:
        """System prompt with the user's business context appended"""
        context = build_business_context(profile)
        context_block = f"\n\nBUSINESS CONTEXT:\n{context}." if context else ""
        if seasonal_tip:
            context_block += f"\n\nSEASONAL CONTEXT:\n{seasonal_tip}"
        return ADVISOR_PROMPT.format(context=context_block)

    def get_relevant_context(self, profile: Mapping[str, Any]) -> Dict[str, Any]:
        """Profile values that shaped the reply (for the conversation log)"""
        return {name: profile[name] for name in CONTEXT_FIELDS if profile.get(name)}

    def generate_response(
        self,
        message: str,
        user_profile: Mapping[str, Any],
        enhanced: bool = False,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Generate the advisor reply for a message

        Args:
            message: The user's message
            user_profile: Profile after merging this message's information
            enhanced: Add the seasonal tip to the prompt and the result

        Returns:
            Dict with content, context_used, suggestions (and seasonal_tip when enhanced)

        Raises:
            openai.OpenAIError / RuntimeError when the model cannot be reached
        """
        client = self._require_client()
        seasonal_tip = get_seasonal_tip(today) if enhanced else None

        response = client.chat.completions.create(
            model=self.response_model,
            messages=[
                {"role": "system", "content": self.build_system_prompt(user_profile, seasonal_tip)},
                {"role": "user", "content": message},
            ],
            temperature=settings.RESPONSE_TEMPERATURE,
            max_tokens=settings.RESPONSE_MAX_TOKENS,
        )

        result = {
            "content": response.choices[0].message.content or "",
            "context_used": self.get_relevant_context(user_profile),
            "suggestions": generate_follow_up_suggestions(user_profile),
        }
        if enhanced:
            result["seasonal_tip"] = seasonal_tip
        return result

    @staticmethod
    def fallback_response() -> Dict[str, Any]:
        """Reply used when the model cannot answer"""
        return {
            "content": APOLOGY_MESSAGE,
            "context_used": {},
            "suggestions": [],
        }
