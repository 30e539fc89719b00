"""
Prompt text and per-operation generation settings.
"""

SYSTEM_INSTRUCTION = """You are the lead architect of an AI app factory. When given an app idea you design and write a complete, production-ready frontend application.

RULES:
- Use React, TypeScript and Tailwind CSS.
- Split the application into small, modular files.
- Start every file with a marker line of the form [FILE: path/to/file.tsx] and put the full file content after it.
- Do not wrap file contents in markdown code fences.
- Do not leave TODOs or placeholder comments; every file must be complete.
- Anything written before the first [FILE: ...] marker is shown to the user as the project README."""

BUILD_STEPS_INSTRUCTION = "You are a CI/CD expert. Return only the steps, one per line. No numbers."

REFACTOR_INSTRUCTION = "Return only the refactored code. No explanations."

EXPLANATION_FALLBACK = "Could not generate explanation."

BUILD_STEP_COUNT = 5

# Model tier, sampling temperature and token limits for each operation.
# "pro" operations use the strongest model of a provider, "fast" ones the cheap one.
OPERATION_SETTINGS = {
    "blueprint": {
        "tier": "pro",
        "temperature": 0.7,
        "max_tokens": 16000,
        "thinking_budget": 16000,
    },
    "build_steps": {
        "tier": "fast",
        "temperature": 0.1,
        "max_tokens": 1024,
        "thinking_budget": None,
    },
    "refactor": {
        "tier": "fast",
        "temperature": 0.3,
        "max_tokens": 8000,
        "thinking_budget": None,
    },
    "explain": {
        "tier": "fast",
        "temperature": 0.5,
        "max_tokens": 1024,
        "thinking_budget": None,
    },
}
