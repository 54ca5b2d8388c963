import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from code_mentor.core.config import Settings
from code_mentor.core.deps import get_project_store, get_settings_dep, get_summarizer
from code_mentor.core.errors import CodeMentorError, InvalidRequest, UploadTooLarge
from code_mentor.core.security import require_api_key
from code_mentor.models.projects import (
    FileContentResponse,
    FileTreeResponse,
    UploadResponse,
    UploadType,
)
from code_mentor.services.beginner_lens import filter_tree
from code_mentor.services.storage import ProjectStore
from code_mentor.services.summary_service import ProjectSummarizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["projects"])

UPLOAD_FAILED = "Failed to process project upload"


@router.post("/upload-project", response_model=UploadResponse)
def upload_project(
    uploadType: str = Form(...),
    file: Optional[UploadFile] = File(None),
    repoUrl: Optional[str] = Form(None),
    store: ProjectStore = Depends(get_project_store),
    summarizer: ProjectSummarizer = Depends(get_summarizer),
    settings: Settings = Depends(get_settings_dep),
    _: Optional[str] = Depends(require_api_key),
):
    """
    Materialize a project from a ZIP archive or a git URL, then summarize it.
    The directory is created first and is not cleaned up on failure.
    """
    try:
        project = store.create_project()

        if uploadType == UploadType.zip.value:
            if file is None:
                raise InvalidRequest("No ZIP file provided")
            data = file.file.read(settings.max_upload_bytes + 1)
            if len(data) > settings.max_upload_bytes:
                raise UploadTooLarge(f"ZIP too large (max {settings.MAX_UPLOAD_MB} MB)")
            files = store.extract_zip(project, data)
        elif uploadType == UploadType.git.value:
            if not repoUrl:
                raise InvalidRequest("No repository URL provided")
            store.clone_repository(project, repoUrl)
            files = store.read_project_files(project.root)
        else:
            raise InvalidRequest("Invalid upload type")

        summary = summarizer.summarize(files)
    except CodeMentorError as e:
        if e.status_code < 500:
            raise
        logger.error("Error handling project upload: %s (%s)", e.message, e.details)
        raise CodeMentorError(UPLOAD_FAILED, details=e.message)
    except Exception:
        logger.exception("Error handling project upload")
        raise CodeMentorError(UPLOAD_FAILED)

    logger.info("Project %s uploaded (%s, %d files)", project.id, uploadType, len(files))
    return UploadResponse(projectId=project.id, summary=summary, fileCount=len(files))


@router.get("/project-files/{project_id}", response_model=FileTreeResponse)
def project_files(
    project_id: str,
    beginner: bool = Query(False, description="Apply the Beginner Lens filter"),
    store: ProjectStore = Depends(get_project_store),
):
    files = store.build_tree(project_id)
    if beginner:
        files = filter_tree(files)
    return FileTreeResponse(files=files)


@router.get("/file-content/{project_id}", response_model=FileContentResponse)
def file_content(
    project_id: str,
    path: Optional[str] = Query(None, description="File path relative to the project root"),
    store: ProjectStore = Depends(get_project_store),
):
    return store.read_file(project_id, path or "")
