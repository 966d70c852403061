"""
AI gateway service for writing help, reply drafting and complaint classification
"""
import asyncio
import json
from typing import Any, Dict, List, Optional, Tuple

import openai
from openai import AsyncOpenAI

from resolve.config import settings
from resolve.errors import AICreditsExhaustedError, AIRateLimitError, AIServiceError, InvalidInputError
from resolve.logging_config import logger
from resolve.models import ClassificationResult, ReplySuggestions

ASSIST_PROMPTS = {
    "improve": (
        "You are a text improvement assistant. Your job is to ONLY return the improved version "
        "of the text. Do not include any explanations, introductions, or reasoning. Just return "
        "the improved text directly, nothing else.",
        "Improve this complaint description to be clear, professional, and detailed while "
        "maintaining the original intent:\n\n{text}",
    ),
    "suggest_title": (
        "You are a helpful assistant that suggests clear, concise complaint titles. Create a "
        "title that accurately summarizes the issue in 5-10 words.",
        "Based on this complaint description, suggest a clear title:\n\n{description}",
    ),
    "suggest_category": (
        "You are a helpful assistant that categorizes complaints. Analyze the complaint and "
        "suggest the most appropriate category from: Academic, Administrative, Facilities, "
        "Technical, or Other.",
        "Categorize this complaint:\n\n{text}",
    ),
    "chat": (
        "You are a helpful assistant for the Brototype complaint system. Help students with "
        "writing complaints, understanding the process, and providing guidance. Be concise "
        "and supportive.",
        "{text}",
    ),
}

REPLY_TONES: List[Tuple[str, str]] = [
    ("formal", "formal and professional"),
    ("friendly", "friendly and casual"),
    ("empathetic", "empathetic and understanding"),
]

CLASSIFY_SYSTEM_PROMPT = (
    "You are a complaint classification AI. Return JSON with: category, confidence (0-1), "
    "tags (array), priority_score (0-100), predicted_hours (integer)."
)

CLASSIFY_TOOL = {
    "type": "function",
    "function": {
        "name": "classify_complaint",
        "description": "Classify a complaint and return structured data",
        "parameters": {
            "type": "object",
            "properties": {
                "category": {"type": "string"},
                "confidence": {"type": "number"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "priority_score": {"type": "number"},
                "predicted_hours": {"type": "number"},
            },
            "required": ["category", "confidence", "tags", "priority_score", "predicted_hours"],
        },
    },
}


class AIService:
    """Service for calls to the OpenAI-compatible AI gateway"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize AI service

        Args:
            api_key: Gateway API key (uses settings if not provided)
            base_url: Gateway base URL (uses settings if not provided)
        """
        self.api_key = api_key or settings.AI_GATEWAY_API_KEY
        if not self.api_key:
            raise ValueError("AI gateway API key is required")

        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=base_url or settings.AI_GATEWAY_URL,
            timeout=settings.REQUEST_TIMEOUT,
            max_retries=0,
        )
        self.model = settings.AI_MODEL
        self.max_tokens = 500
        self.temperature = 0.7

        logger.info(f"AI service initialized with {self.model}")

    async def assist(self, action: str, text: Optional[str] = None, description: Optional[str] = None) -> str:
        """
        Run one writing-assistant action

        Args:
            action: improve, suggest_title, suggest_category or chat
            text: Text the action works on
            description: Complaint description, used by suggest_title

        Returns:
            The model's reply text
        """
        if action not in ASSIST_PROMPTS:
            raise InvalidInputError("Invalid action")

        source = description if action == "suggest_title" else text
        if not source or not source.strip():
            raise InvalidInputError("Text is required for this action")

        system_prompt, user_template = ASSIST_PROMPTS[action]
        response = await self._call_gateway(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_template.format(text=text or "", description=description or "")},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return self._message_content(response)

    async def suggest_replies(self, title: str, description: str) -> ReplySuggestions:
        """
        Draft three replies to a complaint, one per tone, concurrently

        Returns:
            ReplySuggestions with formal, friendly and empathetic drafts
        """

        async def draft(tone: str) -> str:
            response = await self._call_gateway(
                [
                    {
                        "role": "user",
                        "content": (
                            f"Write a {tone} reply to this complaint:\n\nTitle: {title}\n"
                            f"Description: {description}\n\nReply (2-3 sentences max):"
                        ),
                    }
                ]
            )
            return self._message_content(response)

        drafts = await asyncio.gather(*(draft(tone) for _, tone in REPLY_TONES))
        return ReplySuggestions(**{key: text for (key, _), text in zip(REPLY_TONES, drafts)})

    async def classify_complaint(self, title: str, description: str, severity: str) -> ClassificationResult:
        """
        Classify a complaint, falling back to a neutral classification on any failure

        Args:
            title: Complaint title
            description: Complaint description
            severity: Student-assigned severity

        Returns:
            ClassificationResult
        """
        try:
            response = await self._call_gateway(
                [
                    {"role": "system", "content": CLASSIFY_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": (
                            f"Classify this complaint:\nTitle: {title.strip()}\n"
                            f"Description: {description.strip()}\nSeverity: {severity}"
                        ),
                    },
                ],
                tools=[CLASSIFY_TOOL],
                tool_choice={"type": "function", "function": {"name": "classify_complaint"}},
            )
            return self._parse_classification(response)

        except (AIServiceError, ValueError) as e:
            logger.warning(f"Classification failed, using fallback: {str(e)}")
            return ClassificationResult.fallback()

    async def _call_gateway(self, messages: List[Dict[str, str]], **kwargs: Any) -> Any:
        """
        Make one chat completion call

        Raises:
            AIRateLimitError: Gateway answered 429
            AICreditsExhaustedError: Gateway answered 402
            AIServiceError: Any other failure
        """
        try:
            return await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                **kwargs,
            )

        except openai.RateLimitError as e:
            logger.warning(f"AI gateway rate limit hit: {str(e)}")
            raise AIRateLimitError() from e

        except openai.APIStatusError as e:
            if e.status_code == 402:
                logger.warning("AI gateway credits exhausted")
                raise AICreditsExhaustedError() from e
            logger.error(f"AI gateway error {e.status_code}: {str(e)}")
            raise AIServiceError() from e

        except openai.APIError as e:
            logger.error(f"AI gateway error: {str(e)}")
            raise AIServiceError() from e

    def _message_content(self, response: Any) -> str:
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise AIServiceError() from e
        if not content:
            raise AIServiceError()
        return content.strip()

    def _parse_classification(self, response: Any) -> ClassificationResult:
        """
        Parse the classify_complaint tool call

        Raises:
            ValueError: If the tool call is missing or malformed
        """
        try:
            tool_call = response.choices[0].message.tool_calls[0]
            arguments = json.loads(tool_call.function.arguments)
        except (AttributeError, IndexError, TypeError) as e:
            raise ValueError(f"Missing classification tool call: {str(e)}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in classification: {str(e)}")

        result = ClassificationResult.model_validate(arguments)
        logger.debug(f"Classified complaint as {result.category} ({result.confidence})")
        return result


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Shared AIService, created on first use"""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service


def optional_ai_service() -> Optional[AIService]:
    """AIService if the gateway is configured, else None"""
    try:
        return get_ai_service()
    except ValueError as e:
        logger.warning(f"AI gateway unavailable: {str(e)}")
        return None
