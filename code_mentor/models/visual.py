from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Position(BaseModel):
    x: float = 0
    y: float = 0


class NodeData(BaseModel):
    label: str


class FlowNode(BaseModel):
    id: str
    type: Optional[str] = None
    position: Position = Field(default_factory=Position)
    data: NodeData
    style: Optional[Dict[str, Any]] = None


class FlowEdge(BaseModel):
    id: str
    source: str
    target: str
    label: Optional[str] = None
    type: Optional[str] = None
    animated: Optional[bool] = None
    style: Optional[Dict[str, Any]] = None


class VisualRequest(BaseModel):
    code: str = Field(..., min_length=1)
    language: str = Field(..., min_length=1)


class Visualization(BaseModel):
    nodes: List[FlowNode]
    edges: List[FlowEdge]
    title: str = ""
    description: str = ""
