# Overview: Shine Advisor conversation; one recommendation turn per shopper message.

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..entities import ChatMessage
from ..errors import ModelResponseError, NetworkFailure
from ..recommendations.extractor import clean_message_for_display, extract_recommendation
from ..recommendations.matcher import resolve
from ..recommendations.prompt import build_system_prompt

logger = logging.getLogger(__name__)

GREETING = (
    "Hey there! 👋 I'm here to help you find the right detailing products. "
    "What are you looking to clean or protect today?"
)
ERROR_REPLY = "I'm sorry, I encountered an error. Please try again or check your connection."


@dataclass(frozen=True)
class QuickQuestion:
    icon: str
    title: str
    prompt: str


QUICK_QUESTIONS = (
    QuickQuestion(
        "sparkles", "First time detailer",
        "I'm new to car detailing and want to start taking better care of my car. "
        "What products should I start with?",
    ),
    QuickQuestion(
        "car.fill", "Full exterior wash",
        "I want to do a complete exterior wash and protection for my car. What do I need?",
    ),
    QuickQuestion(
        "chair.lounge.fill", "Interior deep clean",
        "My car's interior is dirty and needs a deep clean. I have leather seats and plastic trim.",
    ),
    QuickQuestion(
        "drop.fill", "Ceramic coating",
        "I want to apply ceramic coating to my car for long-lasting protection. "
        "What products and prep do I need?",
    ),
    QuickQuestion(
        "circle.circle", "Wheel & tire care",
        "I want to clean my wheels and make my tires look new. What should I use?",
    ),
    QuickQuestion(
        "sun.max.fill", "Remove scratches",
        "My car has light scratches and swirl marks. How can I remove them and restore the paint?",
    ),
)


class ShineAdvisor:
    """
    Owns the conversation and runs recommendation turns:
    system prompt from the live catalog + history -> model -> extractor.
    """

    def __init__(self, chat_client, catalog, store_name="Adam's Polishes"):
        self.chat_client = chat_client
        self.catalog = catalog
        self.store_name = store_name
        self.messages: list[ChatMessage] = []
        self.is_loading = False
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.messages = [ChatMessage(role="assistant", content=GREETING)]

    def build_request_messages(self, user_text: str) -> list[dict]:
        messages = [{"role": "system", "content": build_system_prompt(self.catalog.products, self.store_name)}]
        for message in self.messages:
            messages.append({"role": message.role, "content": message.content})
        messages.append({"role": "user", "content": user_text})
        return messages

    def send_message(self, text: str) -> Optional[ChatMessage]:
        user_text = (text or "").strip()
        if not user_text:
            return None

        with self._lock:
            request_messages = self.build_request_messages(user_text)
            self.messages.append(ChatMessage(role="user", content=user_text))

        self.is_loading = True
        try:
            raw_reply = self.chat_client.complete(request_messages)
        except (NetworkFailure, ModelResponseError) as e:
            logger.warning("[Advisor] Chat turn failed: %s", e.message)
            reply = ChatMessage(role="assistant", content=ERROR_REPLY)
        else:
            reply = ChatMessage(
                role="assistant",
                content=clean_message_for_display(raw_reply),
                recommendation=extract_recommendation(raw_reply),
            )
        finally:
            self.is_loading = False

        with self._lock:
            self.messages.append(reply)
        return reply

    def resolve(self, message: ChatMessage) -> list:
        """Pair each recommended product with a catalog product, if any."""
        if message.recommendation is None:
            return []
        return resolve(message.recommendation, self.catalog.products)

    def message_to_dict(self, message: ChatMessage) -> dict:
        data = {
            "id": message.id,
            "role": message.role,
            "content": message.content,
            "timestamp": message.timestamp.isoformat(),
            "recommendation": None,
        }
        if message.recommendation is not None:
            data["recommendation"] = {
                "customer_goal": message.recommendation.customer_goal,
                "reasoning": message.recommendation.reasoning,
                "products": [item.to_dict() for item in self.resolve(message)],
            }
        return data
