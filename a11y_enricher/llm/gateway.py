from __future__ import annotations

from abc import ABC, abstractmethod

from a11y_enricher.config.schema import ModelConfig, ProviderConfig
from a11y_enricher.llm.client import ChatModelClient, create_chat_client
from a11y_enricher.llm.parser import clean_generated_text
from a11y_enricher.llm.prompts import (
    IMAGE_ALT_PROMPT,
    build_button_prompt,
    build_link_prompt,
    build_summary_prompt,
)


class GenerationGateway(ABC):
    """Text and vision generation used by the enrichment phases.

    Every call may raise; callers isolate failures per element.
    """

    @abstractmethod
    def summarize(self, title: str, text_excerpt: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def describe_image(self, image_ref: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def describe_link(self, page_summary: str, link_text: str, url: str, current_title: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def describe_button(
        self,
        page_summary: str,
        button_text: str,
        current_aria_label: str,
        parent_context: str,
    ) -> str:
        raise NotImplementedError


class ChatGenerationGateway(GenerationGateway):
    def __init__(self, client: ChatModelClient) -> None:
        self.client = client

    @property
    def provider_name(self) -> str:
        return self.client.provider_name

    def summarize(self, title: str, text_excerpt: str) -> str:
        return clean_generated_text(self.client.generate(build_summary_prompt(title, text_excerpt)))

    def describe_image(self, image_ref: str) -> str:
        return clean_generated_text(self.client.generate(IMAGE_ALT_PROMPT, image_url=image_ref))

    def describe_link(self, page_summary: str, link_text: str, url: str, current_title: str) -> str:
        prompt = build_link_prompt(page_summary, link_text, url, current_title)
        return clean_generated_text(self.client.generate(prompt))

    def describe_button(
        self,
        page_summary: str,
        button_text: str,
        current_aria_label: str,
        parent_context: str,
    ) -> str:
        prompt = build_button_prompt(page_summary, button_text, current_aria_label, parent_context)
        return clean_generated_text(self.client.generate(prompt))


def create_generation_gateway(provider_config: ProviderConfig, model_config: ModelConfig) -> GenerationGateway:
    return ChatGenerationGateway(create_chat_client(provider_config, model_config))
