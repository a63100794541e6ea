"""
Static advisory content: seasonal tips, business insights, contextual tips
and follow-up questions derived from the profile
"""
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
import logging

from partnur.app.core.completion_scorer import CompletionScorer
from partnur.app.core.field_schema import is_empty

logger = logging.getLogger(__name__)

# (first month, last month, tip)
SEASONAL_TIPS = [
    (1, 2, "Wedding season is on - bundle offers and advance bookings bring in bigger orders."),
    (3, 3, "Holi and financial year-end are here - clear old stock with festive combo deals."),
    (4, 6, "Summer months: extend evening hours and promote cooling or vacation-time products."),
    (7, 9, "Monsoon slows footfall - push WhatsApp orders and home delivery, plan Raksha Bandhan offers."),
    (10, 11, "Navratri and Diwali are your biggest weeks - stock up early and run festive discounts."),
    (12, 12, "Year-end and Christmas - reward loyal customers and collect reviews for the new year."),
]

FOLLOW_UP_QUESTIONS = {
    "business_type": "What kind of business do you run?",
    "location_city": "Which city is your business in?",
    "location_state": "Which state are you located in?",
    "monthly_revenue": "Roughly how much do you earn in a month?",
    "top_products": "Which products or services sell the most?",
    "goals": "What is your main goal for the next few months?",
    "challenges": "What's your biggest business challenge right now?",
    "peak_hours": "At what time of day are you busiest?",
    "peak_days": "Which days of the week are busiest?",
    "staff_count": "How many people work with you?",
    "inventory_source": "Where do you get your stock from?",
    "payment_methods": "How do customers usually pay you - cash, UPI, card?",
    "ad_channels": "How do you advertise your business today?",
    "platforms_used": "Do you sell on any apps like Swiggy, Zomato or Meesho?",
    "past_campaigns": "Have you tried any offers or campaigns before?",
}

CONTEXTUAL_TIPS = {
    "salon": [
        "Offer a loyalty card: every 5th haircut at half price keeps regulars coming back.",
        "Post before/after photos on Instagram and your WhatsApp status every week.",
    ],
    "restaurant": [
        "List your best-selling dishes on Swiggy and Zomato with good photos.",
        "A weekday lunch thali offer fills tables during slow hours.",
    ],
    "grocery": [
        "Take orders on WhatsApp and deliver within your street for repeat customers.",
        "Keep fast-moving staples stocked before the first week of the month.",
    ],
    "boutique": [
        "Share new arrivals in a WhatsApp broadcast list before putting them on display.",
        "Try selling slow-moving designs on Meesho to free up shelf space.",
    ],
}

GENERIC_TIPS = [
    "Create a free Google Business Profile so nearby customers can find you.",
    "Accept UPI payments with a printed QR code at the counter.",
]


def get_seasonal_tip(on: Optional[date] = None) -> str:
    """Tip for the calendar month of *on* (today by default)"""
    month = (on or date.today()).month
    for first, last, tip in SEASONAL_TIPS:
        if first <= month <= last:
            return tip
    return GENERIC_TIPS[0]


def generate_follow_up_suggestions(profile: Mapping[str, Any], limit: int = 2) -> List[str]:
    """Short prompts nudging the user to share the most useful missing details"""
    suggestions = []
    if is_empty(profile.get("business_type")):
        suggestions.append("Tell me about your business type")
    if is_empty(profile.get("monthly_revenue")):
        suggestions.append("Share your monthly revenue range")
    if is_empty(profile.get("challenges")):
        suggestions.append("What's your biggest business challenge?")
    return suggestions[:limit]


def generate_smart_questions(
    profile: Mapping[str, Any],
    scorer: Optional[CompletionScorer] = None,
    limit: int = 3
) -> List[str]:
    """Questions for the heaviest missing profile fields"""
    scorer = scorer or CompletionScorer()
    questions = []
    for name in scorer.missing_fields(profile):
        question = FOLLOW_UP_QUESTIONS.get(name)
        if question:
            questions.append(question)
        if len(questions) >= limit:
            break
    return questions


def get_business_insights(profile: Mapping[str, Any]) -> List[str]:
    """
    Rule-based observations about the profile

    Revenue is compared numerically (rupees per month).
    """
    insights = []

    revenue = profile.get("monthly_revenue")
    if isinstance(revenue, (int, float)) and not isinstance(revenue, bool):
        if revenue < 50000:
            insights.append("At this revenue level, focus on repeat customers before spending on ads.")
        elif revenue < 200000:
            insights.append("Your revenue can support a small monthly ad budget - start with WhatsApp and Instagram.")
        else:
            insights.append("With steady revenue, consider a second location or online ordering channel.")

    staff_count = profile.get("staff_count")
    if isinstance(staff_count, int) and staff_count == 0:
        insights.append("Running solo - automate bookings and payments to save your time.")
    elif isinstance(staff_count, int) and staff_count >= 5:
        insights.append("With a team of your size, fixed roles and shift planning reduce daily confusion.")

    if is_empty(profile.get("platforms_used")):
        insights.append("You are not on any online platform yet - listing on one can bring new customers.")
    if is_empty(profile.get("ad_channels")):
        insights.append("No advertising channels recorded - WhatsApp status updates are a free place to start.")

    peak_days = profile.get("peak_days") or []
    if any(str(day).lower() in ("saturday", "sunday") for day in peak_days):
        insights.append("Weekends are busy for you - run weekday-only offers to balance footfall.")

    return insights


def get_contextual_tips(profile: Mapping[str, Any], limit: int = 3) -> List[str]:
    """Tips matched to the business type, topped up with generic ones"""
    business_type = str(profile.get("business_type") or "").lower()
    tips: List[str] = []
    for keyword, keyword_tips in CONTEXTUAL_TIPS.items():
        if keyword in business_type:
            tips.extend(keyword_tips)
            break

    challenges = [str(c).lower() for c in profile.get("challenges") or []]
    if any("footfall" in c or "customers" in c for c in challenges):
        tips.append("Low footfall? A small referral discount turns existing customers into promoters.")
    if any("competition" in c for c in challenges):
        tips.append("Stand out from competitors with one signature product or service people remember.")

    for tip in GENERIC_TIPS:
        if len(tips) >= limit:
            break
        tips.append(tip)
    return tips[:limit]
