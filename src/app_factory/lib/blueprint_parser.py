"""
Blueprint Parser

Splits the architect's raw response into project files using the
`[FILE: path/to/file.tsx]` marker convention.
"""

import re
from typing import List

from .models import ProjectFile

FILE_MARKER_PATTERN = re.compile(r'\[FILE: (.*?)\]')

README_PATH = "README.md"
FALLBACK_PATH = "App.tsx"


def strip_code_fences(content: str) -> str:
    """
    Remove a markdown code fence wrapped around a file body.

    Models often answer with ```tsx ... ``` even when told not to. Only a fence
    that encloses the whole body is removed; fences inside the code are kept.
    """
    if not content:
        return content

    match = re.match(r'^```[\w.+-]*[ \t]*\n(.*?)\n?```\s*$', content.strip(), re.DOTALL)
    if match:
        return match.group(1).strip()
    return content


def detect_language(path: str) -> str:
    """Map a file path to the language shown in the code pane."""
    ext = path.split('.')[-1] or 'typescript'
    if ext in ('ts', 'tsx'):
        return 'typescript'
    return ext


def parse_ai_response(text: str) -> List[ProjectFile]:
    """
    Parse the architect response into project files.

    Args:
        text: Raw model output containing [FILE: path] markers

    Returns:
        List of ProjectFile, never empty. Text before the first marker becomes
        README.md; a response without usable content becomes a single App.tsx.
    """
    files: List[ProjectFile] = []
    parts = FILE_MARKER_PATTERN.split(text)

    preface = parts[0].strip()
    if preface:
        files.append(ProjectFile(path=README_PATH, content=preface, language='markdown'))

    # re.split alternates captured paths and the text that follows them
    for i in range(1, len(parts), 2):
        path = parts[i].strip()
        content = parts[i + 1].strip() if i + 1 < len(parts) else ''
        files.append(ProjectFile(
            path=path,
            content=strip_code_fences(content),
            language=detect_language(path)
        ))

    if not files:
        return [ProjectFile(path=FALLBACK_PATH, content=text, language='typescript')]
    return files


def summarize_files(files: List[ProjectFile], limit: int = 100) -> str:
    """Build the short per-file context sent along with a build-steps request."""
    return '\n'.join(
        f"File: {f.path}\nContent Summary: {f.content[:limit]}..." for f in files
    )
