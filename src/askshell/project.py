"""Detect project types from signature files in a directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ProjectType:
    name: str
    tools: tuple[str, ...]


_GO = ProjectType("Go", ("go build", "go test", "go run", "go mod"))
_RUST = ProjectType("Rust", ("cargo build", "cargo test", "cargo run"))
_NODE = ProjectType("Node.js", ("npm", "npx", "node", "yarn"))
_RUBY = ProjectType("Ruby", ("bundle", "rake", "ruby"))
_MAVEN = ProjectType("Java (Maven)", ("mvn", "java"))
_GRADLE = ProjectType("Java (Gradle)", ("gradle", "./gradlew", "java"))
_KOTLIN = ProjectType("Kotlin (Gradle)", ("gradle", "./gradlew", "kotlin"))
_MAKE = ProjectType("Make-based", ("make",))
_DOCKER = ProjectType("Docker", ("docker", "docker build"))
_COMPOSE = ProjectType("Docker Compose", ("docker-compose", "docker compose"))
_DOTNET = ProjectType(".NET", ("dotnet build", "dotnet run", "dotnet test"))

# Checked in order; a type is reported once even if several signatures match.
SIGNATURE_FILES: tuple[tuple[str, ProjectType], ...] = (
    ("go.mod", _GO),
    ("Cargo.toml", _RUST),
    ("package.json", _NODE),
    ("requirements.txt", ProjectType("Python", ("pip", "python", "pytest"))),
    ("pyproject.toml", ProjectType("Python", ("pip", "python", "pytest", "poetry"))),
    ("setup.py", ProjectType("Python", ("pip", "python", "pytest"))),
    ("Gemfile", _RUBY),
    ("pom.xml", _MAVEN),
    ("build.gradle", _GRADLE),
    ("build.gradle.kts", _KOTLIN),
    ("Makefile", _MAKE),
    ("Dockerfile", _DOCKER),
    ("docker-compose.yml", _COMPOSE),
    ("docker-compose.yaml", _COMPOSE),
    ("*.csproj", _DOTNET),
    ("*.sln", _DOTNET),
)

_GLOB_CHARS = frozenset("*?[")


def _signature_present(directory: Path, pattern: str) -> bool:
    if _GLOB_CHARS.intersection(pattern):
        return any(directory.glob(pattern))
    return (directory / pattern).exists()


def detect_projects(directory: Path) -> list[ProjectType]:
    detected: list[ProjectType] = []
    seen: set[str] = set()
    for pattern, project_type in SIGNATURE_FILES:
        if project_type.name in seen:
            continue
        if _signature_present(directory, pattern):
            detected.append(project_type)
            seen.add(project_type.name)
    return detected


def format_project_info(directory: Path) -> str:
    projects = detect_projects(directory)
    if not projects:
        return ""
    parts = [f"{p.name} (tools: {', '.join(p.tools)})" for p in projects]
    return f"Detected project type(s): {'; '.join(parts)}"
