#!/usr/bin/env python3
"""
Code Builder

Writes parsed project files to an output directory and reads a directory back
into project files, so the CLI can hand generated code to the build and
refactor commands.
"""

import os
from pathlib import Path
from typing import List

from .blueprint_parser import detect_language
from .errors import UnsafePathError
from .models import ProjectFile

SKIPPED_DIRS = {".git", "node_modules", "__pycache__", "dist", "build"}


class CodeBuilder:
    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)

    def _resolve(self, filename: str) -> Path:
        """Resolve a model-supplied path, refusing anything outside the output directory."""
        root = self.output_dir.resolve()
        file_path = (root / filename.lstrip("/\\")).resolve()
        if root != file_path and root not in file_path.parents:
            raise UnsafePathError(root, filename)
        return file_path

    def create_file(self, filename: str, content: str) -> Path:
        """
        Create a file with the given content in the output directory.

        Args:
            filename: Relative path to the file
            content: Content to write to the file
        """
        file_path = self._resolve(filename)

        # Create parent directories if they don't exist
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)
            if content and not content.endswith('\n'):
                f.write('\n')

        print(f"✓ Created: {file_path}")
        return file_path

    def write_files(self, files: List[ProjectFile]) -> List[Path]:
        """Write every file, or none of them if any path leaves the output directory."""
        for f in files:
            self._resolve(f.path)
        return [self.create_file(f.path, f.content) for f in files]

    def read_files(self) -> List[ProjectFile]:
        """Load every text file under the output directory as project files."""
        if not self.output_dir.is_dir():
            raise FileNotFoundError(f"Project directory {self.output_dir} not found")

        files: List[ProjectFile] = []
        for root, dirs, filenames in os.walk(self.output_dir):
            dirs[:] = sorted(d for d in dirs if d not in SKIPPED_DIRS and not d.startswith('.'))
            for filename in sorted(filenames):
                if filename.startswith('.'):
                    continue
                path = Path(root) / filename
                try:
                    content = path.read_text(encoding='utf-8')
                except UnicodeDecodeError:
                    # Binary assets are not part of the source view
                    continue
                relative = path.relative_to(self.output_dir).as_posix()
                files.append(ProjectFile(path=relative, content=content, language=detect_language(relative)))
        return files
