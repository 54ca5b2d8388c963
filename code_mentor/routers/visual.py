from fastapi import APIRouter, Depends

from code_mentor.core.deps import get_visual_service
from code_mentor.models.visual import VisualRequest, Visualization
from code_mentor.services.visual_service import VisualService

router = APIRouter(prefix="/api", tags=["visual"])


@router.post("/generate-visual", response_model=Visualization, response_model_exclude_none=True)
def generate_visual(body: VisualRequest, service: VisualService = Depends(get_visual_service)):
    return service.generate(body.code, body.language)
