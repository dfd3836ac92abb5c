"""
ProjectAnalyzer - README-grounded project summaries.

Fetches a project's documentation, truncates it to the chat budget and asks
the chat session for a short bullet-point analysis, streaming tokens to the
caller as they arrive.
"""

from __future__ import annotations

import logging

from gitseeker.infrastructure.ai.providers import ChatMessage, TokenCallback
from gitseeker.infrastructure.ai.worker import ChatSession
from gitseeker.infrastructure.sources import get_readme_fetcher
from gitseeker.infrastructure.sources.readme import ReadmeFetcher, truncate_readme
from gitseeker.models import UnifiedProject, get_source_config

logger = logging.getLogger(__name__)

NO_DOCUMENTATION_MESSAGE = "Could not find documentation for this project."

SYSTEM_PROMPT = """You are an expert software engineer and technical analyst. Your task is to analyze project documentation and provide actionable insights.

ANALYSIS GUIDELINES:
1. Focus on WHAT the project does (core purpose)
2. Highlight KEY features or unique capabilities
3. Explain WHO should use it and WHEN
4. Mention technical requirements or prerequisites if critical
5. Be concise but informative - aim for 3-4 bullet points
6. Use clear, professional language
7. If it's an AI model, mention the model type and use cases

Format your response as bullet points starting with • or -"""

USER_PROMPT_TEMPLATE = """Analyze this {source_name} project: "{full_name}"

Project Description: {description}
Language/Framework: {language}
Topics/Tags: {topics}

Documentation:
{readme}

Provide a clear, actionable analysis in 3-4 bullet points."""


def build_analysis_messages(project: UnifiedProject, readme: str) -> list[ChatMessage]:
    """System and user messages for one project; `readme` is used as given."""
    user = USER_PROMPT_TEMPLATE.format(
        source_name=get_source_config(project.source)["name"],
        full_name=project.full_name,
        description=project.description or "No description provided",
        language=project.language or "Not specified",
        topics=", ".join(project.topics) or "None",
        readme=readme,
    )
    return [ChatMessage("system", SYSTEM_PROMPT), ChatMessage("user", user)]


class ProjectAnalyzer:
    """
    Args:
        session: Initialized chat session
        readme_fetcher: README source (default: the shared fetcher)
    """

    def __init__(self, session: ChatSession, readme_fetcher: ReadmeFetcher | None = None):
        self._session = session
        self._readme_fetcher = readme_fetcher

    @property
    def readme_fetcher(self) -> ReadmeFetcher:
        if self._readme_fetcher is None:
            self._readme_fetcher = get_readme_fetcher()
        return self._readme_fetcher

    async def analyze(self, project: UnifiedProject, on_token: TokenCallback) -> str:
        """
        Stream an analysis of `project` and return the full text.

        Without documentation no chat is started: the fixed
        NO_DOCUMENTATION_MESSAGE is passed to `on_token` and returned.

        Raises:
            ChatAbortedError: The session was aborted mid-stream
            ChatError: The chat failed
        """
        readme = await self.readme_fetcher.get_readme(project)
        if not readme:
            logger.info(f"No documentation found for {project.id}")
            on_token(NO_DOCUMENTATION_MESSAGE)
            return NO_DOCUMENTATION_MESSAGE

        messages = build_analysis_messages(project, truncate_readme(readme))
        chunks: list[str] = []

        def collect(token: str) -> None:
            chunks.append(token)
            on_token(token)

        await self._session.chat(messages, collect)
        logger.debug(f"Analysis of {project.id}: {sum(len(c) for c in chunks)} chars")
        return "".join(chunks)
