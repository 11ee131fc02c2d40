"""Chat bridge to the hosted Gemini model ("Prakriti Mitra" persona).

The bridge never raises to its caller: any failure - no API key, a network
error, an HTTP error status, a malformed response or a timeout - resolves to
a fixed Telugu apology, and the cause is only logged. There is no retry.
"""

import logging
from typing import Iterable, Optional, Union

import httpx

from prakriti.config import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_CHAT_TEMPERATURE,
    DEFAULT_CHAT_TIMEOUT,
    PrakritiConfig,
    get_api_key,
)
from prakriti.models import ChatRole, ChatTurn


logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = (
    "క్షమించండి, సమాధానం ఇవ్వడంలో సమస్య ఏర్పడింది. దయచేసి మళ్ళీ ప్రయత్నించండి."
)

SYSTEM_INSTRUCTION = """You are "Prakriti Mitra" (Nature's Friend), an expert AI assistant for natural farming in Andhra Pradesh, specifically focusing on APCNF (Andhra Pradesh Community-managed Natural Farming) techniques.

Your primary goal is to help farmers in Telugu with their queries about:
1. Natural farming principles (9 principles of APCNF).
2. Preparation of natural inputs like Jeevamrutham, Beejamrutham, Ghanajeevamrutham, and various Kashayalu (Neemastram, Brahmastram, etc.).
3. Pest and disease management using non-pesticide methods (NPM).
4. 365 Days Green Cover (365DGC) and Pre-Monsoon Dry Sowing (PMDS).
5. Soil health and management.
6. Specific crop management for Rice, Groundnut, Cotton, Chillies, etc.

Guidelines:
- Always respond in Telugu.
- Use a friendly, encouraging, and respectful tone suitable for farmers.
- Base your answers on the principles of natural farming.
- If a query is about chemical fertilizers or pesticides, gently explain why natural alternatives are better for soil health and long-term sustainability.
- Keep instructions clear and step-by-step for easy understanding.

Context: You have deep knowledge of the APCNF Handbook 2022."""


HistoryEntry = Union[ChatTurn, dict]


def _as_turn(entry: HistoryEntry) -> ChatTurn:
    if isinstance(entry, ChatTurn):
        return entry
    return ChatTurn.model_validate(entry)


class ChatBridge:
    """Async client for Gemini ``generateContent`` with a fallback reply."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_CHAT_MODEL,
        temperature: float = DEFAULT_CHAT_TEMPERATURE,
        timeout: float = DEFAULT_CHAT_TIMEOUT,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ):
        """Initialize the chat bridge.

        Args:
            api_key: Gemini API key. Falls back to the GEMINI_API_KEY
                     environment variable when not given.
            model: Gemini model name.
            temperature: Sampling temperature sent with every request.
            timeout: Request timeout in seconds.
            system_instruction: Persona/policy text sent with every request.
        """
        self.api_key = api_key if api_key is not None else get_api_key()
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.system_instruction = system_instruction
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, config: PrakritiConfig) -> "ChatBridge":
        return cls(
            model=config.chat_model,
            temperature=config.chat_temperature,
            timeout=config.chat_timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ChatBridge":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    def build_payload(self, message: str, history: Iterable[HistoryEntry]) -> dict:
        """Build the request body: prior turns in order, then the new message."""
        contents = [
            {"role": turn.role.value, "parts": [{"text": turn.text}]}
            for turn in map(_as_turn, history)
        ]
        contents.append({"role": ChatRole.USER.value, "parts": [{"text": message}]})
        return {
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
            "contents": contents,
            "generationConfig": {"temperature": self.temperature},
        }

    @staticmethod
    def extract_text(data: dict) -> str:
        """Pull the reply text out of a ``generateContent`` response."""
        candidate = data["candidates"][0]
        parts = candidate.get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)

    async def send(self, message: str, history: Iterable[HistoryEntry] = ()) -> str:
        """Send one message with the full prior history and return the reply.

        Never raises; failures become ``APOLOGY_MESSAGE``.
        """
        try:
            if not self.api_key:
                raise RuntimeError(f"No Gemini API key configured for model {self.model}")
            response = await self.client.post(
                f"/models/{self.model}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json=self.build_payload(message, history),
            )
            response.raise_for_status()
            return self.extract_text(response.json())
        except Exception:
            logger.exception("Error calling Gemini API")
            return APOLOGY_MESSAGE


class Conversation:
    """Append-only chat history driven through a ``ChatBridge``."""

    def __init__(self, bridge: ChatBridge) -> None:
        self.bridge = bridge
        self.turns: list[ChatTurn] = []

    async def ask(self, message: str) -> Optional[str]:
        """Send a message; blank input is ignored and returns None."""
        if not message.strip():
            return None
        history = tuple(self.turns)
        self.turns.append(ChatTurn(role=ChatRole.USER, text=message))
        reply = await self.bridge.send(message, history)
        self.turns.append(ChatTurn(role=ChatRole.MODEL, text=reply or ""))
        return reply
