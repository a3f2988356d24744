"""
Central constants for the analysis core
"""

from typing import Dict, List, Tuple

# Name reported as the diagnostic source
DIAGNOSTIC_SOURCE = "gitignore-ls"

# Characters a backslash may escape inside a pattern
ESCAPABLE_CHARACTERS = frozenset('#! \\*?[]')

# Position encodings accepted for client-supplied columns
POSITION_ENCODINGS = ("utf-16", "utf-8", "utf-32")
DEFAULT_POSITION_ENCODING = "utf-16"

# Characters that re-trigger completion in the editor
COMPLETION_TRIGGER_CHARACTERS = ["/", "!"]

# Common ignore idioms offered as completions, grouped by ecosystem.
# Each entry is (pattern, description).
COMMON_PATTERNS: Dict[str, List[Tuple[str, str]]] = {
    "Python": [
        ("__pycache__/", "Bytecode cache directories"),
        ("*.py[cod]", "Compiled Python files"),
        ("*$py.class", "Jython class files"),
        (".venv/", "Virtual environment"),
        ("venv/", "Virtual environment"),
        ("*.egg-info/", "Package metadata"),
        (".mypy_cache/", "mypy cache"),
        (".pytest_cache/", "pytest cache"),
        (".tox/", "tox environments"),
        (".coverage", "Coverage data file"),
        ("htmlcov/", "Coverage HTML report"),
        ("dist/", "Distribution archives"),
    ],
    "Node.js": [
        ("node_modules/", "Installed packages"),
        ("npm-debug.log*", "npm debug logs"),
        ("yarn-error.log*", "Yarn error logs"),
        (".npm/", "npm cache"),
        (".next/", "Next.js build output"),
        (".nuxt/", "Nuxt build output"),
        ("*.tsbuildinfo", "TypeScript incremental build info"),
    ],
    "Build output": [
        ("build/", "Build directory"),
        ("out/", "Output directory"),
        ("target/", "Cargo / Maven build directory"),
        ("cmake-build-*/", "CMake build trees"),
        ("CMakeFiles/", "CMake internals"),
        ("*.o", "Object files"),
        ("*.so", "Shared libraries"),
        ("*.dylib", "macOS dynamic libraries"),
        ("*.dll", "Windows dynamic libraries"),
        ("*.exe", "Windows executables"),
        ("*.class", "Java class files"),
    ],
    "Editors": [
        (".vscode/", "VS Code settings"),
        (".idea/", "JetBrains settings"),
        ("*.swp", "Vim swap files"),
        ("*~", "Backup files"),
        ("*.sublime-workspace", "Sublime Text workspace"),
    ],
    "Operating systems": [
        (".DS_Store", "macOS folder metadata"),
        ("._*", "macOS resource forks"),
        ("Thumbs.db", "Windows thumbnail cache"),
        ("Desktop.ini", "Windows folder settings"),
    ],
    "Logs and temporary files": [
        ("*.log", "Log files"),
        ("logs/", "Log directories"),
        ("*.tmp", "Temporary files"),
        ("*.bak", "Backup files"),
        ("coverage/", "Coverage output"),
    ],
    "Environment files": [
        (".env", "Environment variables"),
        (".env.*", "Environment variants"),
        ("!.env.example", "Keep the example environment file"),
    ],
    "Patterns": [
        ("**/", "Any number of leading directories"),
        ("**/*.orig", "Merge conflict leftovers at any depth"),
    ],
}
