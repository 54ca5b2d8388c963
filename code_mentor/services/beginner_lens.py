"""
Beginner Lens: hides files and directories that tend to confuse newcomers
(build output, lock files, tool configs, caches) from the file tree.
"""
from typing import List

from code_mentor.models.projects import FileNode, NodeType

FILTERED_DIRECTORIES = [
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".git",
    ".vscode",
    "__pycache__",
    ".venv",
    "env",
    "vendor",
    "storage",
    "bootstrap/cache",
    "target",
    "out",
    "bin",
    "obj",
    "migrations",
    ".pytest_cache",
    ".idea",
    "public",
]

# exact names; a trailing "*" would turn an entry into a prefix match
FILTERED_FILES = [
    "package-lock.json",
    "yarn.lock",
    ".env",
    ".eslintrc",
    ".prettierrc",
    "babel.config.js",
    "webpack.config.js",
    "rollup.config.js",
    "tsconfig.json",
    "jest.config.js",
    ".gitignore",
    "LICENSE",
    ".DS_Store",
    "Thumbs.db",
    "composer.lock",
    ".project",
    ".classpath",
    "README.md",
    "build_output.txt",
    "next.config.js",
    "next.config.ts",
    "next.config.mjs",
    "next.config.cjs",
    "postcss.config.js",
    "postcss.config.mjs",
    "postcss.config.cjs",
    "tailwind.config.js",
    "tailwind.config.ts",
    "tailwind.config.mjs",
    "tailwind.config.cjs",
    "vercel.json",
    "eslint.config.js",
    "eslint.config.ts",
    "eslint.config.mjs",
    "eslint.config.cjs",
]

FILTERED_EXTENSIONS = [
    ".min.js",
    ".map",
    ".pyc",
    ".pyo",
    ".pyd",
    ".class",
    ".jar",
    ".war",
    ".dll",
    ".exe",
    ".pdb",
    ".user",
    ".suo",
    ".log",
]


def should_filter(path: str, is_directory: bool) -> bool:
    normalized = path.replace("\\", "/").lower()
    parts = normalized.split("/")
    name = parts[-1]

    if is_directory:
        for d in FILTERED_DIRECTORIES:
            d = d.lower()
            if "/" in d:
                if d in normalized:
                    return True
            elif d in parts:
                return True
        return False

    for f in FILTERED_FILES:
        f = f.lower()
        if f.endswith("*"):
            if name.startswith(f[:-1]):
                return True
        elif name == f:
            return True

    return any(name.endswith(ext) for ext in FILTERED_EXTENSIONS)


def filter_tree(nodes: List[FileNode]) -> List[FileNode]:
    """Pruned copy of the tree; the input is left untouched."""
    out: List[FileNode] = []
    for node in nodes:
        is_dir = node.type == NodeType.directory
        if should_filter(node.path, is_dir):
            continue
        if is_dir:
            out.append(node.model_copy(update={"children": filter_tree(node.children or [])}))
        else:
            out.append(node)
    return out
