"""Tests for repository.detection rule tables and language voting."""

from repository.detection import (
    ARCHITECTURE_RULES,
    FRAMEWORK_RULES,
    PROJECT_TYPE_RULES,
    DetectionContext,
    Rule,
    count_languages,
    extension,
    file_label,
    first_match,
    primary_language,
)
from schemas import FileEntry


def _files(*paths: str) -> list[FileEntry]:
    return [FileEntry(name=p.rsplit("/", 1)[-1], path=p) for p in paths]


def _ctx(deps=None, paths=(), language="Unknown") -> DetectionContext:
    return DetectionContext.build({"dependencies": deps or {}}, _files(*paths), language)


class TestFirstMatch:
    def test_order_decides(self):
        rules = [Rule("first", lambda ctx: True), Rule("second", lambda ctx: True)]
        assert first_match(rules, DetectionContext()) == "first"

    def test_default_when_nothing_matches(self):
        assert first_match([Rule("x", lambda ctx: False)], DetectionContext()) == "Unknown"
        assert first_match([], DetectionContext(), default="Web Application") == "Web Application"


class TestFramework:
    def test_react_dependency(self):
        assert first_match(FRAMEWORK_RULES, _ctx({"react": "^18"})) == "React"

    def test_react_beats_express(self):
        ctx = _ctx({"express": "^4", "react": "^18"})
        assert first_match(FRAMEWORK_RULES, ctx) == "React"

    def test_dev_dependencies_count(self):
        ctx = DetectionContext.build({"devDependencies": {"vue": "^3"}}, [], "Unknown")
        assert first_match(FRAMEWORK_RULES, ctx) == "Vue.js"

    def test_angular_scoped_package(self):
        assert first_match(FRAMEWORK_RULES, _ctx({"@angular/core": "^17"})) == "Angular"

    def test_dependency_rules_precede_file_rules(self):
        ctx = _ctx({"express": "^4"}, paths=["next.config.js"])
        assert first_match(FRAMEWORK_RULES, ctx) == "Express.js"

    def test_file_rules(self):
        assert first_match(FRAMEWORK_RULES, _ctx(paths=["manage.py"])) == "Django"
        assert first_match(FRAMEWORK_RULES, _ctx(paths=["Gemfile"])) == "Rails"
        assert first_match(FRAMEWORK_RULES, _ctx(paths=["pom.xml"])) == "Spring"
        assert first_match(FRAMEWORK_RULES, _ctx(paths=["src/App.vue"])) == "Vue.js"

    def test_unknown(self):
        assert first_match(FRAMEWORK_RULES, _ctx(paths=["main.c"])) == "Unknown"


class TestProjectTypeAndArchitecture:
    def test_full_stack(self):
        ctx = _ctx({"react": "^18", "express": "^4"})
        assert first_match(ARCHITECTURE_RULES, ctx) == "Full-stack (React + Express)"
        assert first_match(PROJECT_TYPE_RULES, ctx) == "React Application"

    def test_express_backend(self):
        ctx = _ctx({"express": "^4"})
        assert first_match(ARCHITECTURE_RULES, ctx) == "Backend (Express)"
        assert first_match(PROJECT_TYPE_RULES, ctx) == "Node.js Backend"

    def test_python_application(self):
        ctx = _ctx(paths=["requirements.txt", "app/main.py"], language="Python")
        assert first_match(PROJECT_TYPE_RULES, ctx, default="Web Application") == "Python Application"

    def test_default_project_type(self):
        ctx = _ctx(paths=["index.html"])
        assert first_match(PROJECT_TYPE_RULES, ctx, default="Web Application") == "Web Application"


class TestLanguages:
    def test_extension(self):
        assert extension("src/App.JSX") == "jsx"
        assert extension("Dockerfile") == "dockerfile"
        assert extension("a/b.tar.gz") == "gz"

    def test_file_label(self):
        assert file_label("README.md") == "Markdown"
        assert file_label("src/App.jsx") == "React JSX"
        assert file_label("weird.xyz") == "Unknown"

    def test_count_languages(self):
        counts = count_languages(_files("a.py", "b.py", "c.js", "README.md"))
        assert counts == {"Python": 2, "JavaScript": 1}

    def test_declared_language_wins(self):
        assert primary_language("Go", _files("a.py", "b.py")) == "Go"

    def test_most_frequent(self):
        assert primary_language(None, _files("a.py", "b.js", "c.js")) == "JavaScript"

    def test_tie_goes_to_first_seen(self):
        assert primary_language(None, _files("a.rs", "b.go", "c.go", "d.rs")) == "Rust"

    def test_no_code_files(self):
        assert primary_language(None, _files("README.md")) == "Unknown"
        assert primary_language("", []) == "Unknown"
