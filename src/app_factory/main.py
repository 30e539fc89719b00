#!/usr/bin/env python3
"""
App Factory CLI
Generate an app from an idea, explain or refactor a file, and run the
simulated build pipeline from the terminal.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv

from app_factory.lib.blueprint_parser import parse_ai_response
from app_factory.lib.build_center import BuildCenter
from app_factory.lib.code_builder import CodeBuilder
from app_factory.lib.errors import AppFactoryError, UnknownTargetError
from app_factory.lib.llm_client import FactoryLLMClient
from app_factory.lib.models import BUILD_TARGETS, Project, get_build_target
from app_factory.lib.progress_loader import show_progress, LoaderStyle, render_progress_bar

# Load environment variables from .env file
load_dotenv()

LOG_ICONS = {"info": "ℹ️ ", "success": "✅", "error": "❌"}


def cmd_generate(client: FactoryLLMClient, args) -> int:
    print(f"🚀 Generating app for: {args.idea}")
    print("-" * 50)

    blueprint = client.generate_app_blueprint(args.idea)
    files = parse_ai_response(blueprint)

    builder = CodeBuilder(args.output)
    builder.write_files(files)

    print(f"✅ {len(files)} file(s) written to {args.output}")
    return 0


async def _run_build(client: FactoryLLMClient, project: Project, target: str, delay_range) -> bool:
    center = BuildCenter(client, delay_range=delay_range)

    async def report(event: str, payload):
        if event == "build_log":
            icon = LOG_ICONS.get(payload["type"], "")
            print(f"\r[{payload['timestamp']}] {icon} {payload['type'].upper()}: {payload['message']}")
        elif event == "build_progress" and payload["is_building"]:
            print(render_progress_bar(payload["progress"]), end="\r", flush=True)

    center.add_listener(report)
    return await center.start_build(project, target)


def cmd_build(client: FactoryLLMClient, args) -> int:
    try:
        target = get_build_target(args.target)
    except UnknownTargetError:
        print(f"❌ Unknown target '{args.target}'. Choose from: "
              f"{', '.join(t.key for t in BUILD_TARGETS)}")
        return 2

    project_dir = Path(args.project_dir)
    project = Project.new(args.name or project_dir.resolve().name)
    project.files = CodeBuilder(str(project_dir)).read_files()
    if not project.files:
        print(f"⚠️ No source files found in {project_dir}")
        return 1

    print(f"🏭 BUILD API CENTER: {project.name} → {target.label} ({target.arch})")
    success = asyncio.run(_run_build(client, project, target.key, (args.min_delay, args.max_delay)))
    return 0 if success else 1


def cmd_refactor(client: FactoryLLMClient, args) -> int:
    path = Path(args.file)
    content = path.read_text(encoding="utf-8")

    with show_progress(f"Refactoring {path.name}", LoaderStyle.THINKING):
        result = client.refactor_code(path.as_posix(), content)

    if args.in_place:
        path.write_text(result, encoding="utf-8")
        print(f"✅ Refactored {path}")
    else:
        print(result)
    return 0


def cmd_explain(client: FactoryLLMClient, args) -> int:
    content = Path(args.file).read_text(encoding="utf-8")

    with show_progress("Explaining code", LoaderStyle.THINKING):
        explanation = client.explain_code(content)

    print(explanation)
    return 0


def cmd_serve(args) -> int:
    from app_factory.webapp.start_web import main as start_web
    start_web(host=args.host, port=args.port, assume_yes=args.yes)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="app-factory",
        description="AI app factory: generate apps from ideas and run simulated builds"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate an app blueprint from an idea")
    generate.add_argument("idea", help="Natural language description of the app")
    generate.add_argument("-o", "--output", default="generated-app", help="Directory for the generated files")

    build = subparsers.add_parser("build", help="Run the simulated build pipeline for a project directory")
    build.add_argument("project_dir", help="Directory holding the project's source files")
    build.add_argument("-t", "--target", default=BUILD_TARGETS[0].key,
                       help=f"Deployment target ({', '.join(t.key for t in BUILD_TARGETS)})")
    build.add_argument("--name", help="Project name shown in the build log")
    build.add_argument("--min-delay", type=float, default=1.0, help="Minimum seconds per build stage")
    build.add_argument("--max-delay", type=float, default=2.0, help="Maximum seconds per build stage")

    refactor = subparsers.add_parser("refactor", help="Refactor a source file")
    refactor.add_argument("file")
    refactor.add_argument("-i", "--in-place", action="store_true", help="Overwrite the file with the result")

    explain = subparsers.add_parser("explain", help="Explain a source file in 3 bullet points")
    explain.add_argument("file")

    serve = subparsers.add_parser("serve", help="Start the web interface")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("-y", "--yes", action="store_true", help="Start even without API keys")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return cmd_serve(args)

    # Only generation streams tokens; the other commands print a single result
    client = FactoryLLMClient(interactive=(args.command == "generate"))
    commands = {
        "generate": cmd_generate,
        "build": cmd_build,
        "refactor": cmd_refactor,
        "explain": cmd_explain,
    }

    try:
        return commands[args.command](client, args)
    except AppFactoryError as e:
        print(f"❌ {e}")
        return 1
    except FileNotFoundError as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⛔ Stopped")
        return 130


if __name__ == "__main__":
    sys.exit(main())
