#!/usr/bin/env python3
"""
Start the App Factory Web Interface
"""

import os
import sys

from dotenv import load_dotenv

from app_factory.webapp.web_interface import run_server

API_KEY_VARS = ["GEMINI_API_KEY", "API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "OPENROUTER_API_KEY"]


def check_env() -> bool:
    """Check that at least one LLM provider key is available."""
    load_dotenv()
    found = [name for name in API_KEY_VARS if os.getenv(name)]
    if found:
        print(f"✅ API key found: {', '.join(found)}")
        return True

    print("⚠️  No LLM API key found")
    print("\n🔑 Please set one of the provider keys:")
    print("   1. Create a .env file with: GEMINI_API_KEY=your_key_here")
    print("   2. Or export ANTHROPIC_API_KEY, OPENAI_API_KEY or OPENROUTER_API_KEY")
    return False


def main(host=None, port=None, assume_yes: bool = False):
    print("🚀 App Factory Web Interface")
    print("=" * 50)

    if not check_env() and not assume_yes:
        print("\n⚠️  Warning: The interface will start but generation and builds will fail.")
        response = input("\nContinue anyway? [y/N]: ").strip().lower()
        if response not in ['y', 'yes']:
            sys.exit(1)

    print("\n🌐 Starting web interface...")
    print("💡 Tip: Keep this terminal open while using the web interface")
    print("🛑 Press Ctrl+C to stop the server")
    print("-" * 50)

    try:
        run_server(host=host, port=port)
    except KeyboardInterrupt:
        print("\n👋 Web interface stopped")


if __name__ == "__main__":
    main()
