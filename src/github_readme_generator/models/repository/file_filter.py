from fnmatch import fnmatch

from pydantic import BaseModel, ConfigDict, Field

EXCLUDED_DIRECTORIES: list[str] = [
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Dependencies and virtual environments
    "node_modules",
    "bower_components",
    "vendor",
    "venv",
    ".venv",
    "env",
    "site-packages",
    # Build output and caches
    "dist",
    "build",
    "out",
    "target",
    "bin",
    "obj",
    ".next",
    ".nuxt",
    "coverage",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".gradle",
    ".idea",
    ".vscode",
    # Tests
    "test",
    "tests",
    "__tests__",
    "spec",
    "__snapshots__",
]

EXCLUDED_FILE_PATTERNS: list[str] = [
    # OS metadata
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # Secrets
    ".env",
    ".env.*",
    "*.pem",
    "*.key",
    "*.p12",
    "*.pfx",
    "id_rsa*",
    ".npmrc",
    ".pypirc",
    # Images
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.gif",
    "*.bmp",
    "*.ico",
    "*.svg",
    "*.webp",
    "*.tiff",
    # Binaries, archives, fonts and media
    "*.exe",
    "*.dll",
    "*.so",
    "*.dylib",
    "*.bin",
    "*.class",
    "*.jar",
    "*.pyc",
    "*.o",
    "*.a",
    "*.zip",
    "*.tar",
    "*.gz",
    "*.tgz",
    "*.7z",
    "*.rar",
    "*.pdf",
    "*.woff",
    "*.woff2",
    "*.ttf",
    "*.otf",
    "*.eot",
    "*.mp3",
    "*.mp4",
    "*.wav",
    "*.mov",
    # Minified and generated assets
    "*.min.js",
    "*.min.css",
    "*.map",
    "*.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    # Tests and specs
    "*.test.*",
    "*.spec.*",
    "test_*.py",
    "*_test.py",
    "*_test.go",
    "*Test.java",
    # Type declarations
    "*.d.ts",
    "*.pyi",
]

INCLUDED_FILE_PATTERNS: list[str] = [
    # Source code
    "*.py",
    "*.js",
    "*.jsx",
    "*.mjs",
    "*.cjs",
    "*.ts",
    "*.tsx",
    "*.vue",
    "*.svelte",
    "*.java",
    "*.kt",
    "*.scala",
    "*.go",
    "*.rs",
    "*.rb",
    "*.php",
    "*.c",
    "*.h",
    "*.cpp",
    "*.hpp",
    "*.cc",
    "*.cs",
    "*.swift",
    "*.m",
    "*.dart",
    "*.ex",
    "*.exs",
    "*.sh",
    "*.sql",
    "*.html",
    "*.css",
    "*.scss",
    # Documentation
    "*.md",
    "*.mdx",
    "*.rst",
    "*.adoc",
    "*.txt",
    # Dependency manifests and build files
    "package.json",
    "tsconfig.json",
    "composer.json",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "requirements*.txt",
    "Pipfile",
    "Cargo.toml",
    "go.mod",
    "Gemfile",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "settings.gradle",
    "Makefile",
    "CMakeLists.txt",
    "Dockerfile",
    "docker-compose*.yml",
    "docker-compose*.yaml",
]


def get_dir_and_file_from_path(path: str) -> tuple[list[str], str]:
    path_parts = [part for part in path.split("/") if part]
    if not path_parts:
        return [], ""
    return path_parts[:-1], path_parts[-1]


def matches_any_pattern(file_name: str, patterns: list[str]) -> bool:
    """Case-insensitive fnmatch of a file name against a list of patterns."""

    lowered_file_name = file_name.lower()

    return any(fnmatch(lowered_file_name, pattern.lower()) for pattern in patterns)


class FileFilter(BaseModel):
    """Decides whether a file in a repository is worth summarizing.

    Exclusions take precedence over inclusions: a file is included only if none of its directories are excluded, its
    name matches no exclude pattern, its name matches at least one include pattern and it is not larger than the
    size ceiling.
    """

    model_config = ConfigDict(frozen=True)

    excluded_directories: list[str] = Field(
        default_factory=lambda: EXCLUDED_DIRECTORIES.copy(),
        description="Directory names that exclude every file beneath them, at any depth.",
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: EXCLUDED_FILE_PATTERNS.copy(),
        description="File name patterns to exclude. Supports fnmatch wildcards.",
    )
    include_patterns: list[str] = Field(
        default_factory=lambda: INCLUDED_FILE_PATTERNS.copy(),
        description="File name patterns to include. Supports fnmatch wildcards.",
    )
    max_size_bytes: int | None = Field(default=None, description="Files larger than this are excluded. No limit if not set.")

    def should_include(self, path: str, size_bytes: int | None = None) -> bool:
        directories, file_name = get_dir_and_file_from_path(path)

        if not file_name:
            return False

        lowered_excluded_directories: set[str] = {directory.lower() for directory in self.excluded_directories}

        if any(directory.lower() in lowered_excluded_directories for directory in directories):
            return False

        if matches_any_pattern(file_name, self.exclude_patterns):
            return False

        if not matches_any_pattern(file_name, self.include_patterns):
            return False

        return not (self.max_size_bytes is not None and size_bytes is not None and size_bytes > self.max_size_bytes)
