"""Render analyzer output into the documentation prompt."""

from schemas import FileEntry, GenerationOptions, RepoAnalysis

SYSTEM_PROMPT = (
    "You are an expert technical writer. Generate comprehensive documentation for "
    "software projects. Keep responses under 2000 tokens."
)

# (README characters, file entries) per detail level; None means no limit.
DETAIL_LIMITS: dict[str, tuple[int | None, int]] = {
    "minimal": (800, 8),
    "extended": (None, 50),
}
MAX_DEPENDENCIES = 10

SECTIONS = [
    "Project overview and purpose",
    "Installation and setup instructions",
    "Usage guide with examples",
    "Architecture and key components",
    "Development and contribution guidelines",
    "Deployment instructions",
    "Troubleshooting section",
]


def build_prompt(repo_data: RepoAnalysis, options: GenerationOptions | None = None) -> str:
    """Build the user prompt for a documentation request.

    Segments, in order: identity, language/framework/file count, README
    excerpt, manifest summary, file listing, instructions. Absent README,
    manifest or files are left out rather than rendered empty.
    """
    options = options or GenerationOptions()
    readme_limit, file_limit = DETAIL_LIMITS[options.detail]
    meta = repo_data.metadata

    parts = [
        f"Generate comprehensive {options.style} documentation for: {meta.repo_name}\n",
        f"Project: {meta.repo_owner}/{meta.repo_name}\n"
        f"Language: {meta.language}\n"
        f"Framework: {meta.framework}\n"
        f"Files: {meta.file_count}\n",
    ]

    if repo_data.readme:
        readme = repo_data.readme if readme_limit is None else repo_data.readme[:readme_limit]
        parts.append(f"README:\n{readme}\n")

    if repo_data.package_json:
        parts.append(_manifest_summary(repo_data.package_json))

    if repo_data.files:
        listing = "\n".join(
            _file_line(f, annotate=options.detail == "extended")
            for f in repo_data.files[:file_limit]
        )
        parts.append(f"Key Files:\n{listing}\n")

    numbered = "\n".join(f"{i}. {section}" for i, section in enumerate(SECTIONS, 1))
    parts.append(
        f"Generate detailed documentation including:\n{numbered}\n\n"
        "Make it comprehensive, professional, and project-specific. Include code examples "
        f"and configuration details. Format in {_format_name(options.format)}."
    )
    return "\n".join(parts)


def _manifest_summary(manifest: dict) -> str:
    lines = ["Package Info:"]
    lines.append(f"Name: {manifest.get('name') or ''}")
    lines.append(f"Description: {manifest.get('description') or ''}")
    scripts = manifest.get("scripts") or {}
    if scripts:
        lines.append(f"Scripts: {', '.join(scripts)}")
    dependencies = manifest.get("dependencies") or {}
    if dependencies:
        lines.append(f"Dependencies: {', '.join(list(dependencies)[:MAX_DEPENDENCIES])}")
    return "\n".join(lines) + "\n"


def _file_line(entry: FileEntry, annotate: bool) -> str:
    if not annotate:
        return f"- {entry.path}"
    size = f" ({format_file_size(entry.size)})" if entry.size else ""
    return f"- {entry.path}{size} [{entry.language}]"


def _format_name(fmt: str) -> str:
    return "Markdown" if fmt.lower() in ("markdown", "md") else fmt.upper()


def format_file_size(size: int | None) -> str:
    """Human-readable size: 0 B, 512 B, 1.5 KB, 2 MB."""
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    value = round(value, 1)
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"
