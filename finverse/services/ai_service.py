import json
import logging
from google import genai
from google.genai import types
from finverse.core.config import settings
from finverse.models.game import GameState, UserProfile

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are Aura Twin, a professional and knowledgeable financial advisor.
You automatically detect the language of the user's input and respond in the SAME language.
You support: English, Hindi, Marathi, German, and other languages.
You communicate with a friendly but formal, professional tone.
You provide practical, actionable financial advice specific to Indian markets.
You are helpful, realistic, and focused on delivering value without being overly emotional.

Current player context:
- Career: {career}
- Net Worth: ₹{net_worth}
- Level: {level}
- Portfolio: {portfolio}

Guidelines:
- Keep responses 2-5 lines maximum
- IMPORTANT: Detect user's language and respond in that same language
- Be professional and respectful
- Provide actionable, specific insights
- Use Indian rupee (₹) and Indian financial terms where applicable
- Maintain a helpful and courteous demeanor
- Acknowledge progress and challenges objectively
- Offer strategic recommendations when appropriate
"""

EMPTY_REPLY = "I'm here to assist with your financial planning. Please feel free to ask any questions."


def inr(amount: float) -> str:
    """Formats a rupee amount with Indian digit grouping (12,34,567)."""
    sign = "-" if amount < 0 else ""
    digits = str(int(round(abs(amount))))
    if len(digits) <= 3:
        return f"{sign}{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}{','.join(groups)},{tail}"


class AIService:
    @staticmethod
    def context_summary(state: GameState) -> dict:
        """Read-only view of the game handed to the mentor."""
        return {
            "netWorth": state.netWorth,
            "portfolio": state.portfolio.as_dict(),
            "level": state.level,
            "career": state.userProfile.career.value if state.userProfile else None,
        }

    @staticmethod
    def fallback_reply(message: str) -> str:
        hint = (
            "Remember: Diversification is key to managing risk. Keep building your portfolio steadily! 💪"
            if "invest" in message.lower()
            else "Keep making smart financial decisions. Your future self will thank you! 🌟"
        )
        return f"I'm having trouble connecting right now, but I'm here to support you! {hint}"

    @staticmethod
    def ask(message: str, context: dict) -> str:
        """
        Asks the mentor for advice using Google Gemini.
        Expected API Key in env: GEMINI_API_KEY

        Never raises: any failure yields the canned fallback so the game keeps going.
        """
        api_key = settings.GEMINI_API_KEY
        if not api_key:
            logger.warning("GEMINI_API_KEY not found. Serving fallback mentor reply.")
            return AIService.fallback_reply(message)

        system_prompt = SYSTEM_PROMPT.format(
            career=context.get("career") or "Unknown",
            net_worth=inr(context.get("netWorth") or 0),
            level=context.get("level") or 1,
            portfolio=json.dumps(context.get("portfolio") or {}),
        )

        try:
            return AIService._generate_google(api_key, system_prompt, message) or EMPTY_REPLY
        except Exception as e:
            logger.error(f"Gemini chat error: {e}")
            return AIService.fallback_reply(message)

    @staticmethod
    def _generate_google(api_key: str, system_prompt: str, message: str) -> str:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=settings.GEMINI_MODEL,
            config=types.GenerateContentConfig(system_instruction=system_prompt),
            contents=message
        )
        return (response.text or "").strip()

    @staticmethod
    def welcome_message(profile: UserProfile) -> str:
        return (
            f"Hello {profile.name}! I'm Aura Twin, your financial advisor. "
            f"I see you're a {profile.career.value} with a monthly salary of ₹{inr(profile.salary)}. "
            f"After accounting for ₹{inr(profile.expenses)} in monthly expenses, you have "
            f"₹{inr(profile.monthlySurplus)} available for investment. "
            f"I'm here to help you build a sustainable financial plan."
        )

    @staticmethod
    def contribution_message(contributions) -> str:
        return (
            f"I invested ₹{inr(contributions.total())} this month: "
            f"SIP ₹{inr(contributions.sip)}, Stocks ₹{inr(contributions.stocks)}, "
            f"Gold ₹{inr(contributions.gold)}, Real Estate ₹{inr(contributions.realEstate)}, "
            f"Savings ₹{inr(contributions.savings)}"
        )

    @staticmethod
    def month_summary(result) -> str:
        """Renders the month-end update posted to the chat."""
        state = result.state
        profile = state.userProfile
        lines = [
            f"Month {state.currentMonth}, {state.currentYear} update:",
            f"💰 Salary: +₹{inr(profile.salary)}",
            f"💸 Expenses: -₹{inr(profile.expenses)}",
        ]

        total_returns = result.totalReturns
        if total_returns > 0:
            lines.append(f"📈 Portfolio gains: +₹{inr(total_returns)}")
        elif total_returns < 0:
            lines.append(f"📉 Portfolio loss: ₹{inr(total_returns)}")

        event = result.lifeEvent
        if event:
            lines.append(f"⚡ {event.name}: {'+' if event.impact > 0 else ''}₹{inr(event.impact)}")

        for achievement_id in result.unlocked:
            a = state.achievement(achievement_id)
            lines.append(f"🏆 Achievement unlocked: {a.icon} {a.title}")

        lines.append("")
        lines.append(f"💼 Net Worth: ₹{inr(state.netWorth)}")
        return "\n".join(lines)
