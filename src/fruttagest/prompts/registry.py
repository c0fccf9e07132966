"""Prompt template registry with variable injection and versioning."""
from __future__ import annotations
from pathlib import Path
import hashlib

TEMPLATES_DIR = Path(__file__).parent / "templates"


class PromptRegistry:
    """Loads Markdown prompt templates and fills in ``{placeholders}``."""

    def __init__(self, templates_dir: Path | None = None):
        self._templates_dir = templates_dir or TEMPLATES_DIR
        self._cache: dict[str, str] = {}
        self._hashes: dict[str, str] = {}

    def load_template(self, name: str) -> str:
        """Load a prompt template by name (e.g., 'order_parsing_system')."""
        if name not in self._cache:
            path = self._templates_dir / f"{name}.md"
            if not path.exists():
                raise FileNotFoundError(f"Prompt template not found: {path}")
            self._cache[name] = path.read_text(encoding="utf-8")
        return self._cache[name]

    def render(self, template_name: str, variables: dict | None = None) -> str:
        """Render a template, replacing each ``{key}`` with ``str(value)``.

        Only the given keys are replaced, so literal braces in the template
        (JSON examples) are left alone.
        """
        template = self.load_template(template_name)
        for key, value in (variables or {}).items():
            template = template.replace(f"{{{key}}}", str(value))
        return template

    def get_hash(self, template_name: str) -> str:
        """Get SHA-256 hash of a template (for reproducibility tracking)."""
        if template_name not in self._hashes:
            content = self.load_template(template_name)
            self._hashes[template_name] = hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
        return self._hashes[template_name]

    def get_version(self, template_name: str) -> str:
        """Get version string for a template (hash-based)."""
        return f"v1.0-{self.get_hash(template_name)[:8]}"

    def clear_cache(self):
        self._cache.clear()
        self._hashes.clear()
