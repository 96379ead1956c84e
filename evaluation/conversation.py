from __future__ import annotations  # Free-form interviewer replies

from pathlib import Path
from textwrap import dedent
from typing import List, Optional, Sequence

from pydantic import BaseModel

from config import LlmRoute, load_app_registry
from errors import ConversationFailed, InputValidationError
from llm_gateway import HttpClient, LlmGatewayError, complete_text

from .models import ChatMessage, InterviewContext

CONVERSATION_KEY = "evaluation.conversation"


class InterviewerReply(BaseModel):  # Registry schema placeholder; replies are plain text
    reply: str


class InterviewerConversation:  # Answers clarifying questions from the student
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[HttpClient] = None) -> "InterviewerConversation":
        registry = load_app_registry(config_path, {CONVERSATION_KEY: InterviewerReply})
        route, _ = registry[CONVERSATION_KEY]
        return cls(route, client=client)

    def respond(
        self,
        context: InterviewContext,
        student_message: str,
        history: Sequence[ChatMessage] = (),
    ) -> str:
        message = student_message.strip()
        if not message:
            raise InputValidationError("Student message is required")
        messages: List[dict] = [{"role": "system", "content": _system_prompt(context)}]
        for item in history:
            role = "assistant" if item.role == "interviewer" else "user"
            messages.append({"role": role, "content": item.text})
        messages.append({"role": "user", "content": message})
        try:
            return complete_text(messages, cfg=self._route, client=self._client)
        except LlmGatewayError as exc:
            raise ConversationFailed(f"Failed to generate interviewer reply: {exc}") from exc


def _system_prompt(context: InterviewContext) -> str:
    return dedent(
        f"""
        You are a professional interviewer for the {context.job_role} position.
        Current round: {context.current_round or "general"}
        Required skills: {", ".join(context.skills)}

        Ask and clarify questions naturally, keep a conversational but professional tone,
        and never reveal scores or evaluation notes. Reply in plain text.
        """
    ).strip()


__all__ = ["CONVERSATION_KEY", "InterviewerConversation", "InterviewerReply"]
