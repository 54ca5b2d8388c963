from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NodeType(str, Enum):
    file = "file"
    directory = "directory"


class FileNode(BaseModel):
    name: str
    path: str = Field(..., description="Path relative to the project root, with '/' separators")
    type: NodeType
    children: Optional[List["FileNode"]] = Field(
        default=None,
        description="Only set for directories",
    )


class FileTreeResponse(BaseModel):
    files: List[FileNode]


class FileContentResponse(BaseModel):
    name: str
    path: str
    content: str
    language: str


class UploadType(str, Enum):
    zip = "zip"
    git = "git"


class UploadResponse(BaseModel):
    projectId: str
    summary: str
    fileCount: int = Field(..., ge=0)


FileNode.model_rebuild()
