#!/usr/bin/env python3
"""
App Factory LLM Client
Wraps the four generative-AI calls behind the factory (generate blueprint,
get build steps, refactor, explain) with fallback across multiple providers.
"""

import os
import time
from typing import Optional, List, Dict, Any, Tuple

import anthropic
import requests
from dotenv import load_dotenv
from google import genai
from google.genai import types
from openai import OpenAI

from .blueprint_parser import summarize_files, strip_code_fences
from .constants import (
    SYSTEM_INSTRUCTION, BUILD_STEPS_INSTRUCTION, REFACTOR_INSTRUCTION,
    EXPLANATION_FALLBACK, BUILD_STEP_COUNT, OPERATION_SETTINGS
)
from .errors import GenerationError
from .event_logger import get_event_logger
from .models import ProjectFile
from .progress_loader import llm_progress, progress_manager

# Load environment variables from .env file
load_dotenv()

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

DEFAULT_PROVIDER_ORDER = ["gemini", "anthropic", "openai", "openrouter"]


class FactoryLLMClient:
    def __init__(self, gemini_api_key=None, anthropic_api_key=None, openai_api_key=None,
                 openrouter_api_key=None, provider_order: Optional[List[str]] = None,
                 interactive: bool = False, event_logger=None):
        """Initialize the client with every provider that has an API key."""
        self.gemini_api_key = gemini_api_key or os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY')
        self.anthropic_api_key = anthropic_api_key or os.getenv('ANTHROPIC_API_KEY')
        self.openai_api_key = openai_api_key or os.getenv('OPENAI_API_KEY')
        self.openrouter_api_key = openrouter_api_key or os.getenv('OPENROUTER_API_KEY')

        # Interactive mode streams tokens and shows spinners in the terminal
        self.interactive = interactive
        self.debug_dir = os.getenv('APP_FACTORY_DEBUG_DIR')
        self.event_logger = event_logger or get_event_logger()

        self.gemini_client = genai.Client(api_key=self.gemini_api_key) if self.gemini_api_key else None
        self.anthropic_client = (
            anthropic.Anthropic(api_key=self.anthropic_api_key) if self.anthropic_api_key else None
        )
        self.openai_client = OpenAI(api_key=self.openai_api_key) if self.openai_api_key else None

        # Define LLM provider configurations
        self.llm_providers = [
            {
                "name": "Gemini",
                "type": "gemini",
                "models": {"pro": "gemini-3-pro-preview", "fast": "gemini-3-flash-preview"}
            },
            {
                "name": "Claude",
                "type": "anthropic",
                "models": {"pro": "claude-sonnet-4-20250514", "fast": "claude-3-5-haiku-latest"}
            },
            {
                "name": "GPT-4o",
                "type": "openai",
                "models": {"pro": "gpt-4o", "fast": "gpt-4o-mini"}
            },
            {
                "name": "OpenRouter Gemini",
                "type": "openrouter",
                "models": {"pro": "google/gemini-pro-1.5", "fast": "google/gemini-flash-1.5"}
            },
        ]

        order = provider_order or self._provider_order_from_env()
        by_type = {p["type"]: p for p in self.llm_providers}
        self.llm_providers = [by_type[t] for t in order if t in by_type]

    @staticmethod
    def _provider_order_from_env() -> List[str]:
        raw = os.getenv('APP_FACTORY_PROVIDERS', '')
        order = [p.strip().lower() for p in raw.split(',') if p.strip()]
        return order or DEFAULT_PROVIDER_ORDER

    def is_available(self, config: Dict) -> bool:
        """Check whether a provider has credentials configured."""
        provider_type = config["type"]
        if provider_type == "gemini":
            return self.gemini_client is not None
        if provider_type == "anthropic":
            return self.anthropic_client is not None
        if provider_type == "openai":
            return self.openai_client is not None
        if provider_type == "openrouter":
            return bool(self.openrouter_api_key)
        return False

    @property
    def available_providers(self) -> List[Dict]:
        return [p for p in self.llm_providers if self.is_available(p)]

    @property
    def primary_provider_name(self) -> str:
        available = self.available_providers
        return available[0]["name"] if available else "no configured"

    @staticmethod
    def _split_system(messages: List[Dict]) -> Tuple[str, List[Dict]]:
        system_message = ""
        user_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system_message = msg["content"]
            else:
                user_messages.append(msg)
        return system_message, user_messages

    def call_gemini(self, messages: List[Dict], config: Dict, settings: Dict) -> Optional[str]:
        """Call the Gemini API through google-genai."""
        if not self.gemini_client:
            return None

        system_message, user_messages = self._split_system(messages)
        contents = "\n\n".join(msg["content"] for msg in user_messages)

        thinking_config = None
        if settings.get("thinking_budget"):
            thinking_config = types.ThinkingConfig(thinking_budget=settings["thinking_budget"])

        generate_config = types.GenerateContentConfig(
            system_instruction=system_message or None,
            temperature=settings["temperature"],
            thinking_config=thinking_config
        )

        response = self.gemini_client.models.generate_content(
            model=config["models"][settings["tier"]],
            contents=contents,
            config=generate_config
        )
        return response.text or ""

    def call_anthropic(self, messages: List[Dict], config: Dict, settings: Dict) -> Optional[str]:
        """Call Anthropic API with streaming."""
        if not self.anthropic_client:
            return None

        system_message, user_messages = self._split_system(messages)
        request = {
            "model": config["models"][settings["tier"]],
            "max_tokens": settings["max_tokens"],
            "temperature": settings["temperature"],
            "messages": user_messages
        }
        if system_message:
            request["system"] = system_message

        if self.interactive:
            print(f"\n🤖 {config['name']} Response:")

        full_response = ""
        with self.anthropic_client.messages.stream(**request) as stream:
            for text in stream.text_stream:
                full_response += text
                if self.interactive:
                    print(text, end="", flush=True)

        if self.interactive:
            print("\n")
        return full_response

    def call_openai(self, messages: List[Dict], config: Dict, settings: Dict) -> Optional[str]:
        """Call OpenAI API with streaming."""
        if not self.openai_client:
            return None

        if self.interactive:
            print(f"\n🤖 {config['name']} Response:")

        response_stream = self.openai_client.chat.completions.create(
            model=config["models"][settings["tier"]],
            messages=messages,
            max_tokens=settings["max_tokens"],
            temperature=settings["temperature"],
            stream=True
        )

        full_response = ""
        for chunk in response_stream:
            if chunk.choices and chunk.choices[0].delta.content:
                content = chunk.choices[0].delta.content
                full_response += content
                if self.interactive:
                    print(content, end="", flush=True)

        if self.interactive:
            print("\n")
        return full_response

    def call_openrouter(self, messages: List[Dict], config: Dict, settings: Dict) -> Optional[str]:
        """Call OpenRouter API."""
        if not self.openrouter_api_key:
            return None

        headers = {
            "Authorization": f"Bearer {self.openrouter_api_key}",
            "Content-Type": "application/json",
            "X-Title": "App Factory"
        }
        payload = {
            "model": config["models"][settings["tier"]],
            "messages": messages,
            "max_tokens": settings["max_tokens"],
            "temperature": settings["temperature"]
        }

        response = requests.post(OPENROUTER_URL, json=payload, headers=headers, timeout=120)
        response.raise_for_status()

        data = response.json()
        return data["choices"][0]["message"]["content"] or ""

    def _call_provider(self, messages: List[Dict], config: Dict, settings: Dict) -> Optional[str]:
        provider_type = config["type"]
        if provider_type == "gemini":
            call = self.call_gemini
        elif provider_type == "anthropic":
            call = self.call_anthropic
        elif provider_type == "openai":
            call = self.call_openai
        else:
            call = self.call_openrouter

        # Streaming providers print tokens themselves; the others get a spinner
        if self.interactive and provider_type in ("gemini", "openrouter"):
            with llm_progress(config["name"]):
                return call(messages, config, settings)
        return call(messages, config, settings)

    def validate_response(self, content: str, operation: str) -> Tuple[bool, str]:
        """Check that a non-empty response is usable for the operation."""
        if operation == "build_steps":
            if not [line for line in content.split('\n') if line.strip()]:
                return False, "No build steps in response"
        return True, ""

    def _save_debug_response(self, response: str, config: Dict, operation: str):
        os.makedirs(self.debug_dir, exist_ok=True)
        timestamp = int(time.time() * 1000)
        debug_file = os.path.join(
            self.debug_dir, f"ai_response_{config['type']}_{operation}_{timestamp}.txt"
        )
        with open(debug_file, 'w', encoding='utf-8') as f:
            f.write(f"=== RAW AI RESPONSE FROM {config['name']} ===\n")
            f.write(f"Operation: {operation}\n")
            f.write("=" * 50 + "\n")
            f.write(response)
            f.write("\n" + "=" * 50 + "\n")
        print(f"🔍 DEBUG: Raw AI response saved to {debug_file}")

    def generate_with_fallback(self, messages: List[Dict], operation: str) -> Optional[str]:
        """
        Generate a response, falling back across the configured providers.

        Returns:
            The first valid response, "" when providers answered but only with
            empty text, or None when every provider failed.
        """
        settings = OPERATION_SETTINGS[operation]
        providers = self.available_providers
        if not providers:
            print("❌ No LLM provider configured. Set GEMINI_API_KEY, ANTHROPIC_API_KEY, "
                  "OPENAI_API_KEY or OPENROUTER_API_KEY.")
            self.event_logger.log_error("NO PROVIDERS CONFIGURED", {"operation": operation})
            return None

        if self.interactive:
            progress_manager.cleanup_all()

        got_empty_response = False
        for i, config in enumerate(providers, 1):
            if self.interactive:
                print(f"🤖 Trying {config['name']} ({i}/{len(providers)})...")

            start_time = time.time()
            try:
                response = self._call_provider(messages, config, settings)
            except Exception as e:
                print(f"❌ Error with {config['name']}: {str(e)}")
                self.event_logger.log_api_call(operation, config["name"], False, time.time() - start_time)
                self.event_logger.log_provider_failure(operation, config["name"], str(e))
                continue

            self.event_logger.log_api_call(operation, config["name"], response is not None,
                                           time.time() - start_time)
            if response is None:
                continue

            if not response:
                got_empty_response = True
                print(f"⚠️ {config['name']} returned empty response")
                self.event_logger.log_provider_failure(operation, config["name"], "empty response")
                continue

            if self.debug_dir:
                self._save_debug_response(response, config, operation)

            is_valid, validation_feedback = self.validate_response(response, operation)
            if is_valid:
                if self.interactive:
                    print(f"✅ {config['name']} provided valid response!")
                return response

            print(f"❌ {config['name']} response validation failed: {validation_feedback}")
            self.event_logger.log_provider_failure(operation, config["name"], validation_feedback)

        if got_empty_response:
            return ""

        print(f"❌ All LLM providers failed for {operation}")
        return None

    def _generate(self, operation: str, messages: List[Dict]) -> str:
        response = self.generate_with_fallback(messages, operation)
        if response is None:
            raise GenerationError(operation)
        return response

    def get_blueprint_prompt(self, prompt: str) -> str:
        return f"""Build a full production-ready application for: {prompt}.

RULES:
1. Use React, TypeScript, and Tailwind CSS.
2. Provide multiple files if necessary.
3. Format output with [FILE: path/to/file.tsx] markers.
4. Ensure all code is clean and modular."""

    def generate_app_blueprint(self, prompt: str) -> str:
        """Generate a full project structure for the app idea."""
        messages = [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": self.get_blueprint_prompt(prompt)}
        ]
        return self._generate("blueprint", messages)

    def get_build_pipeline_steps(self, files: List[ProjectFile], target: str) -> List[str]:
        """Ask the model for realistic build/compilation steps for the files."""
        code_context = summarize_files(files)
        messages = [
            {"role": "system", "content": BUILD_STEPS_INSTRUCTION},
            {"role": "user", "content": (
                f"The user is building this project for {target}. Based on these files, "
                f"give me {BUILD_STEP_COUNT} realistic, technical build steps (one per line):\n\n"
                f"{code_context}"
            )}
        ]
        response = self._generate("build_steps", messages)
        return [line for line in response.split('\n') if line.strip()]

    def refactor_code(self, path: str, content: str) -> str:
        """Refactor a file; the original content is kept when the model returns nothing."""
        messages = [
            {"role": "system", "content": REFACTOR_INSTRUCTION},
            {"role": "user", "content": (
                f"Refactor this file ({path}) to be more efficient and follow best practices:\n\n{content}"
            )}
        ]
        response = self._generate("refactor", messages)
        return strip_code_fences(response) or content

    def explain_code(self, content: str) -> str:
        messages = [
            {"role": "user", "content": f"Explain how this code works in 3 bullet points:\n\n{content}"}
        ]
        response = self._generate("explain", messages)
        return response or EXPLANATION_FALLBACK

