"""Heuristic tables for language, framework and project-type detection.

Each table is an ordered list of ``Rule(label, predicate)``. The first rule
whose predicate holds wins; order in the table decides, not specificity.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from schemas import FileEntry

UNKNOWN = "Unknown"


@dataclass
class DetectionContext:
    """Everything a rule may look at."""

    dependencies: dict[str, Any] = field(default_factory=dict)
    file_names: list[str] = field(default_factory=list)
    language: str = UNKNOWN

    @classmethod
    def build(
        cls,
        package_json: dict[str, Any] | None,
        files: Iterable[FileEntry],
        language: str = UNKNOWN,
    ) -> "DetectionContext":
        deps: dict[str, Any] = {}
        if package_json:
            deps.update(package_json.get("dependencies") or {})
            deps.update(package_json.get("devDependencies") or {})
        return cls(
            dependencies=deps,
            file_names=[f.path.lower() for f in files],
            language=language,
        )

    def has_dependency(self, name: str) -> bool:
        return name in self.dependencies

    def has_file(self, fragment: str) -> bool:
        fragment = fragment.lower()
        return any(fragment in name for name in self.file_names)


@dataclass(frozen=True)
class Rule:
    label: str
    predicate: Callable[[DetectionContext], bool]


def first_match(rules: list[Rule], ctx: DetectionContext, default: str = UNKNOWN) -> str:
    for rule in rules:
        if rule.predicate(ctx):
            return rule.label
    return default


def _dep(*names: str) -> Callable[[DetectionContext], bool]:
    return lambda ctx: any(ctx.has_dependency(n) for n in names)


def _file(*fragments: str) -> Callable[[DetectionContext], bool]:
    return lambda ctx: any(ctx.has_file(f) for f in fragments)


FRAMEWORK_RULES: list[Rule] = [
    # Manifest dependencies
    Rule("React", _dep("react")),
    Rule("Vue.js", _dep("vue")),
    Rule("Angular", _dep("angular", "@angular/core")),
    Rule("Express.js", _dep("express")),
    Rule("Next.js", _dep("next")),
    Rule("Nuxt.js", _dep("nuxt")),
    Rule("Gatsby", _dep("gatsby")),
    Rule("Django", _dep("django")),
    Rule("Flask", _dep("flask")),
    Rule("FastAPI", _dep("fastapi")),
    Rule("Spring Boot", _dep("spring")),
    Rule("Laravel", _dep("laravel")),
    Rule("Symfony", _dep("symfony")),
    # File names
    Rule("Next.js", _file("next.config.js", "next.config.mjs", "next.config.ts")),
    Rule("Nuxt.js", _file("nuxt.config.js", "nuxt.config.ts")),
    Rule("Gatsby", _file("gatsby-config.js")),
    Rule("Svelte", _file("svelte.config.js")),
    Rule("Astro", _file("astro.config.mjs")),
    Rule("Vue.js", _file("vue.config.js", ".vue")),
    Rule("Angular", _file("angular.json")),
    Rule("Django", _file("manage.py")),
    Rule("Rails", _file("gemfile", "config.ru")),
    Rule("Laravel", _file("artisan")),
    Rule("Spring", _file("pom.xml", "build.gradle")),
]

PROJECT_TYPE_RULES: list[Rule] = [
    Rule("React Application", lambda ctx: ctx.has_dependency("react") or ctx.has_file("app.js")),
    Rule("Node.js Backend", _dep("express")),
    Rule(
        "Python Application",
        lambda ctx: ctx.language == "Python" and ctx.has_file("requirements.txt"),
    ),
    Rule("Java Application", lambda ctx: ctx.language == "Java" and ctx.has_file("pom.xml")),
]

ARCHITECTURE_RULES: list[Rule] = [
    Rule(
        "Full-stack (React + Express)",
        lambda ctx: ctx.has_dependency("react") and ctx.has_dependency("express"),
    ),
    Rule("Frontend (React)", _dep("react")),
    Rule("Backend (Express)", _dep("express")),
]

# Extensions that count towards the primary-language vote.
EXTENSION_LANGUAGES: dict[str, str] = {
    "js": "JavaScript",
    "jsx": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "cc": "C++",
    "hpp": "C++",
    "c": "C",
    "h": "C",
    "cs": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "go": "Go",
    "rs": "Rust",
    "swift": "Swift",
    "kt": "Kotlin",
    "scala": "Scala",
}

# Display labels for the file listing; includes non-code formats.
FILE_LABELS: dict[str, str] = {
    **EXTENSION_LANGUAGES,
    "jsx": "React JSX",
    "tsx": "React TSX",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sass": "Sass",
    "json": "JSON",
    "xml": "XML",
    "yaml": "YAML",
    "yml": "YAML",
    "md": "Markdown",
    "txt": "Text",
    "sql": "SQL",
    "sh": "Shell",
    "bash": "Bash",
    "ps1": "PowerShell",
    "dockerfile": "Docker",
}


def extension(path: str) -> str:
    """Lowercase extension without the dot; bare names like Dockerfile count as their own."""
    name = path.rsplit("/", 1)[-1].lower()
    if "." not in name:
        return name
    return name.rsplit(".", 1)[-1]


def file_label(path: str) -> str:
    return FILE_LABELS.get(extension(path), UNKNOWN)


def count_languages(files: Iterable[FileEntry]) -> Counter:
    """Count files per language, in first-encountered order."""
    counts: Counter = Counter()
    for f in files:
        language = EXTENSION_LANGUAGES.get(extension(f.path))
        if language:
            counts[language] += 1
    return counts


def primary_language(declared: str | None, files: Iterable[FileEntry]) -> str:
    """Declared language if present, else the most frequent extension language.

    ``Counter.most_common`` sorts stably, so ties go to the language seen first.
    """
    if declared:
        return declared
    counts = count_languages(files)
    if not counts:
        return UNKNOWN
    return counts.most_common(1)[0][0]


# Substring flags over lowercase paths.
TEST_MARKERS = ("test", "spec")
DOC_MARKERS = ("readme", "docs", "documentation")
DOCKER_MARKERS = ("dockerfile", "docker-compose")
CI_MARKERS = (".github/workflows", ".gitlab-ci", "travis", "jenkinsfile")

# (file-name fragment, component label), checked against the base name.
COMPONENT_MARKERS: list[tuple[str, str]] = [
    ("app.js", "Main Application Component"),
    ("app.tsx", "Main Application Component"),
    ("index.js", "Entry Point"),
    ("main.js", "Entry Point"),
    ("main.py", "Entry Point"),
    ("package.json", "Package Configuration"),
    ("pyproject.toml", "Package Configuration"),
    ("readme", "Documentation"),
]
