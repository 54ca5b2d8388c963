import io
import logging
import os
import posixpath
import re
import subprocess
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from code_mentor.core.errors import (
    CloneError,
    CodeMentorError,
    FileNotFoundInProject,
    InvalidArchive,
    InvalidProjectId,
    InvalidRepositoryUrl,
    InvalidRequest,
    PathIsDirectory,
    PathOutsideProject,
    ProjectNotFound,
)
from code_mentor.core.logging import log_duration
from code_mentor.models.projects import FileContentResponse, FileNode, NodeType

logger = logging.getLogger(__name__)

PROJECT_ID_RE = re.compile(r"project_[0-9]+")
GIT_URL_RE = re.compile(r"(https?://|git://|ssh://|git@)\S+")

# never listed nor read, whatever the lens
EXCLUDED_DIRS = {"node_modules", ".git"}

LANGUAGE_MAP = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "rb": "ruby",
    "java": "java",
    "html": "html",
    "css": "css",
    "json": "json",
    "md": "markdown",
    "txt": "text",
}


@dataclass
class ProjectFile:
    name: str
    content: str


@dataclass
class Project:
    id: str
    root: Path
    files: List[ProjectFile] = field(default_factory=list)


def language_for(path: str) -> str:
    """
    Language tag for the editor, from the file extension.
    Unknown extensions are returned as-is; no extension gives "text".
    """
    ext = posixpath.splitext(path.replace("\\", "/"))[1].lower().lstrip(".")
    if not ext:
        return "text"
    return LANGUAGE_MAP.get(ext, ext)


def normalize_relative_path(raw: str) -> str:
    """
    Normalize a client-supplied path and strip what would climb out of the
    project: leading '..' segments and leading slashes.
    """
    p = posixpath.normpath(raw.replace("\\", "/"))
    p = re.sub(r"^(\.\.(/|$))+", "", p)
    p = p.lstrip("/")
    return "" if p == "." else p


def _safe_member_name(name: str) -> Optional[str]:
    p = posixpath.normpath(name.replace("\\", "/"))
    if p.startswith("/") or p == "." or p == ".." or p.startswith("../"):
        return None
    if ":" in p.split("/", 1)[0]:
        # drive letter (C:...)
        return None
    return p


class ProjectStore:
    """
    Projects live on local disk, one directory per project under base_path.
    No database: the directory is the project.
    """

    def __init__(
        self,
        base_path: str = "./projects",
        max_file_bytes: int = 1_000_000,
        clone_timeout: int = 120,
        clock: Callable[[], float] = time.time,
    ):
        self.base_path = Path(base_path)
        self.max_file_bytes = max_file_bytes
        self.clone_timeout = clone_timeout
        self._clock = clock
        self.base_path.mkdir(parents=True, exist_ok=True)

    # ---------- projects ----------

    def create_project(self) -> Project:
        millis = int(self._clock() * 1000)
        while True:
            project_id = f"project_{millis}"
            root = self.base_path / project_id
            try:
                root.mkdir(parents=True, exist_ok=False)
            except FileExistsError:
                millis += 1
                continue
            logger.info("Created project %s", project_id)
            return Project(id=project_id, root=root)

    def validate_project_id(self, project_id: str) -> None:
        if not PROJECT_ID_RE.fullmatch(project_id or ""):
            raise InvalidProjectId()

    def project_root(self, project_id: str) -> Path:
        self.validate_project_id(project_id)
        root = self.base_path / project_id
        if not root.is_dir():
            raise ProjectNotFound()
        return root

    # ---------- upload ----------

    def extract_zip(self, project: Project, data: bytes) -> List[ProjectFile]:
        """
        Write every file entry of the archive under the project root.

        Entries of max_file_bytes or more are written but not returned.
        Entries that would land outside the root are skipped.
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise InvalidArchive(details=str(e))

        root = project.root.resolve()
        files: List[ProjectFile] = []
        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue

                name = _safe_member_name(info.filename)
                target = root / name if name else None
                if target is None or not target.resolve().is_relative_to(root):
                    logger.warning("Skipping unsafe archive entry %r in %s", info.filename, project.id)
                    continue

                try:
                    content = archive.read(info)
                except (zipfile.BadZipFile, ValueError) as e:
                    raise InvalidArchive(details=f"{info.filename}: {e}")

                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)

                if info.file_size >= self.max_file_bytes:
                    logger.info("Not reading %s (%d bytes)", name, info.file_size)
                    continue
                files.append(ProjectFile(name=name, content=content.decode("utf-8", errors="replace")))

        project.files = files
        return files

    def clone_repository(self, project: Project, url: str) -> None:
        url = (url or "").strip()
        if not GIT_URL_RE.fullmatch(url):
            raise InvalidRepositoryUrl()

        cmd = ["git", "clone", "--depth", "1", url, str(project.root)]
        try:
            with log_duration("git_clone", logger, project=project.id):
                result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.clone_timeout)
        except subprocess.TimeoutExpired:
            raise CloneError("Git clone timed out")
        except FileNotFoundError:
            raise CloneError("git executable not found")

        if result.returncode != 0:
            raise CloneError(details=(result.stderr or "")[:200])

    def read_project_files(self, root: Path) -> List[ProjectFile]:
        """
        Text files under root, skipping excluded directories, symlinks,
        files of max_file_bytes or more, and anything that is not UTF-8.
        """
        files: List[ProjectFile] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                rel = path.relative_to(root).as_posix()
                try:
                    if path.is_symlink() or path.stat().st_size >= self.max_file_bytes:
                        continue
                    content = path.read_text(encoding="utf-8")
                except UnicodeDecodeError:
                    continue
                except OSError as e:
                    logger.warning("Error reading file %s: %s", path, e)
                    continue
                files.append(ProjectFile(name=rel, content=content))
        return files

    def list_file_paths(self, root: Path, limit: Optional[int] = None) -> List[str]:
        """Relative paths of the files under root, without reading them."""
        paths: List[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
            for filename in sorted(filenames):
                if limit is not None and len(paths) >= limit:
                    return paths
                paths.append((Path(dirpath) / filename).relative_to(root).as_posix())
        return paths

    # ---------- browsing ----------

    def build_tree(self, project_id: str) -> List[FileNode]:
        root = self.project_root(project_id)
        return self._build_tree(root, "")

    def _build_tree(self, directory: Path, base: str) -> List[FileNode]:
        nodes: List[FileNode] = []
        for entry in directory.iterdir():
            rel = posixpath.join(base, entry.name) if base else entry.name
            if entry.is_dir() and not entry.is_symlink():
                if entry.name in EXCLUDED_DIRS:
                    continue
                nodes.append(FileNode(
                    name=entry.name,
                    path=rel,
                    type=NodeType.directory,
                    children=self._build_tree(entry, rel),
                ))
            else:
                nodes.append(FileNode(name=entry.name, path=rel, type=NodeType.file))

        nodes.sort(key=lambda n: (n.type != NodeType.directory, n.name.lower(), n.name))
        return nodes

    def read_file(self, project_id: str, raw_path: str) -> FileContentResponse:
        root = self.project_root(project_id).resolve()
        if not raw_path:
            raise InvalidRequest("File path is required")
        if "\x00" in raw_path:
            raise InvalidRequest("Invalid file path")

        rel = normalize_relative_path(raw_path)
        full = (root / rel).resolve()
        if not full.is_relative_to(root):
            raise PathOutsideProject()
        if not full.exists():
            raise FileNotFoundInProject()
        if full.is_dir():
            raise PathIsDirectory()
        if any(part in EXCLUDED_DIRS for part in full.relative_to(root).parts):
            raise FileNotFoundInProject()

        try:
            content = full.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.error("Error reading file %s: %s", full, e)
            raise CodeMentorError("Failed to read file content")

        return FileContentResponse(
            name=posixpath.basename(rel),
            path=raw_path,
            content=content,
            language=language_for(rel),
        )
