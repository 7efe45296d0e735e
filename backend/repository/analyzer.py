"""Repository analysis: URL → GitHub metadata, file tree, README, manifest → RepoAnalysis."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from config import settings
from errors import DocCreatorError, InvalidInput
from schemas import FileEntry, RepoAnalysis, RepoInfo, RepoInsights, RepoMetadata

from .detection import (
    ARCHITECTURE_RULES,
    CI_MARKERS,
    COMPONENT_MARKERS,
    DOC_MARKERS,
    DOCKER_MARKERS,
    FRAMEWORK_RULES,
    PROJECT_TYPE_RULES,
    TEST_MARKERS,
    DetectionContext,
    file_label,
    first_match,
    primary_language,
)
from .github_client import GitHubClient

logger = logging.getLogger(__name__)

MANIFEST_PATH = "package.json"
FEATURE_MARKERS = ("✅", "✓", "•")
DEFAULT_FEATURE = "Documentation generator"

_REPO_URL_RE = re.compile(
    r"github\.com/(?P<owner>[^/\s?#]+)/(?P<repo>[^/\s?#]+)(?:/tree/(?P<branch>[^/\s?#]+))?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str
    branch: str | None = None


def parse_repo_url(url: str) -> RepoRef:
    """Extract owner, repo and optional branch from a GitHub URL.

    Raises:
        InvalidInput: If the string does not contain ``github.com/<owner>/<repo>``.
    """
    match = _REPO_URL_RE.search(url or "")
    if not match:
        raise InvalidInput("Invalid GitHub URL. Expected https://github.com/<owner>/<repo>.")
    repo = match.group("repo")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise InvalidInput("Invalid GitHub URL. Expected https://github.com/<owner>/<repo>.")
    return RepoRef(owner=match.group("owner"), repo=repo, branch=match.group("branch"))


def _default_client() -> GitHubClient:
    return GitHubClient(token=settings.github_token, base_url=settings.github_api_url)


async def analyze_repository(repo_url: str, client: GitHubClient | None = None) -> RepoAnalysis:
    """Fetch and normalise everything the prompt builder needs.

    Metadata is required. A tree that cannot be fetched (an empty
    repository answers 409) is treated as no files; README and manifest
    are optional and come back as ``None`` when missing.

    Raises:
        InvalidInput, NotFound, RateLimited, AuthFailed, UpstreamError
    """
    ref = parse_repo_url(repo_url)
    client = client or _default_client()

    repo_data = await client.get_repo(ref.owner, ref.repo)
    branch = ref.branch or repo_data.get("default_branch") or "main"
    tree = await _fetch_tree(client, ref, branch)
    readme = await _fetch_readme(client, ref, branch)
    package_json = await _fetch_manifest(client, ref, branch)

    files = _build_files(tree)
    language = primary_language(repo_data.get("language"), files)
    ctx = DetectionContext.build(package_json, files, language)

    owner = (repo_data.get("owner") or {}).get("login") or ref.owner
    license_info = repo_data.get("license") or {}

    metadata = RepoMetadata(
        repo_name=repo_data.get("name") or ref.repo,
        repo_owner=owner,
        branch=branch,
        url=repo_data.get("html_url") or f"https://github.com/{ref.owner}/{ref.repo}",
        language=language,
        framework=first_match(FRAMEWORK_RULES, ctx),
        file_count=len(files),
        total_lines=repo_data.get("size") or 0,
        description=repo_data.get("description") or "",
        topics=repo_data.get("topics") or [],
        stars=repo_data.get("stargazers_count") or 0,
        forks=repo_data.get("forks_count") or 0,
        last_updated=repo_data.get("updated_at"),
        created_at=repo_data.get("created_at"),
        homepage=repo_data.get("homepage"),
        license=license_info.get("name"),
    )
    logger.info(
        f"Analyzed {owner}/{metadata.repo_name}@{branch}: {len(files)} files, "
        f"language={metadata.language}, framework={metadata.framework}"
    )

    return RepoAnalysis(
        metadata=metadata,
        files=files,
        readme=readme,
        package_json=package_json,
        repo_info=RepoInfo(
            name=metadata.repo_name,
            description=repo_data.get("description"),
            language=repo_data.get("language"),
            stars=metadata.stars,
            forks=metadata.forks,
            issues=repo_data.get("open_issues_count") or 0,
            last_commit=repo_data.get("pushed_at") or repo_data.get("updated_at"),
            topics=metadata.topics,
        ),
        analysis=_build_insights(ctx, files, readme, package_json),
    )


async def _fetch_tree(client: GitHubClient, ref: RepoRef, branch: str) -> list[dict[str, Any]]:
    try:
        return await client.get_tree(ref.owner, ref.repo, branch)
    except DocCreatorError as e:
        logger.warning(f"Could not fetch file tree for {ref.owner}/{ref.repo}@{branch}: {e.message}")
        return []


async def _fetch_readme(client: GitHubClient, ref: RepoRef, branch: str) -> str | None:
    try:
        return await client.get_readme(ref.owner, ref.repo, branch)
    except DocCreatorError as e:
        logger.info(f"No README for {ref.owner}/{ref.repo}: {e.message}")
        return None


async def _fetch_manifest(
    client: GitHubClient, ref: RepoRef, branch: str
) -> dict[str, Any] | None:
    try:
        raw = await client.get_file(ref.owner, ref.repo, MANIFEST_PATH, branch)
    except DocCreatorError as e:
        logger.info(f"No {MANIFEST_PATH} for {ref.owner}/{ref.repo}: {e.message}")
        return None
    try:
        manifest = json.loads(raw)
    except ValueError:
        logger.warning(f"Unparsable {MANIFEST_PATH} in {ref.owner}/{ref.repo}")
        return None
    return manifest if isinstance(manifest, dict) else None


def _build_files(tree: list[dict[str, Any]]) -> list[FileEntry]:
    files = [
        FileEntry(
            name=item["path"].rsplit("/", 1)[-1],
            path=item["path"],
            size=item.get("size"),
            language=file_label(item["path"]),
        )
        for item in tree
        if item.get("type") == "blob" and item.get("path")
    ]
    files.sort(key=lambda f: f.path)
    return files


def _build_insights(
    ctx: DetectionContext,
    files: list[FileEntry],
    readme: str | None,
    package_json: dict[str, Any] | None,
) -> RepoInsights:
    file_types: dict[str, int] = {}
    structure: dict[str, list[str]] = {}
    components: list[str] = []
    for f in files:
        ext = f".{f.name.rsplit('.', 1)[-1].lower()}" if "." in f.name else "no-extension"
        file_types[ext] = file_types.get(ext, 0) + 1

        top = f.path.split("/", 1)[0] if "/" in f.path else "root"
        structure.setdefault(top, []).append(f.name)

        base = f.name.lower()
        for fragment, label in COMPONENT_MARKERS:
            if fragment in base and label not in components:
                components.append(label)

    def flagged(markers: tuple[str, ...]) -> bool:
        return any(ctx.has_file(m) for m in markers)

    dependencies = None
    if package_json:
        dependencies = {
            "dependencies": package_json.get("dependencies") or {},
            "devDependencies": package_json.get("devDependencies") or {},
            "scripts": package_json.get("scripts") or {},
        }

    return RepoInsights(
        project_type=first_match(PROJECT_TYPE_RULES, ctx, default="Web Application"),
        architecture=first_match(ARCHITECTURE_RULES, ctx),
        main_features=_extract_features(readme, package_json),
        key_components=components or ["Core Application"],
        dependencies=dependencies,
        file_structure=structure,
        file_types=file_types,
        has_tests=flagged(TEST_MARKERS),
        has_docs=flagged(DOC_MARKERS),
        has_docker=flagged(DOCKER_MARKERS),
        has_ci=flagged(CI_MARKERS),
    )


def _extract_features(readme: str | None, package_json: dict[str, Any] | None) -> list[str]:
    """README checklist/bullet lines plus the manifest description."""
    features = []
    if readme:
        for line in readme.splitlines():
            if any(marker in line for marker in FEATURE_MARKERS):
                features.append(line.strip())
    if package_json and package_json.get("description"):
        features.append(package_json["description"])
    return features or [DEFAULT_FEATURE]
