"""Chat route: answer a query for a project and log knowledge gaps."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...chat import QueryOrchestrator
from ...core import ChatTurn, ProjectInfo
from ...core.exceptions import ProjectNotFoundError, RagDeskError

from ..database import get_db
from ..deps import get_orchestrator
from ..models import Project
from ..schemas import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def find_project(db: Session, slug: str) -> ProjectInfo:
    """Resolve a project by custom slug, then by slug."""
    project = db.query(Project).filter(Project.custom_slug == slug).first()
    if project is None:
        project = db.query(Project).filter(Project.slug == slug).first()
    if project is None:
        raise ProjectNotFoundError(slug)
    return ProjectInfo(
        id=project.id,
        name=project.name,
        user_id=project.user_id,
        description=project.description or "",
        plan=project.plan,
    )


@router.post("/chat")
def chat(
    request: ChatRequest,
    db: Session = Depends(get_db),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    if not request.query.strip():
        return JSONResponse(status_code=400, content={"error": "Query is required"})

    try:
        project = find_project(db, request.project_slug)
    except ProjectNotFoundError as e:
        return JSONResponse(status_code=404, content={"error": e.message})

    history = [ChatTurn(role=m.role, content=m.content) for m in request.chat_history]
    try:
        result = orchestrator.answer(request.query, history, project, threshold=request.threshold)
    except RagDeskError as e:
        logger.error(f"Chat failed for project {project.id}: {e}")
        return JSONResponse(status_code=500, content={"error": e.message})

    logger.info(
        f"Chat for project {project.id}: states={[s.value for s in result.states]} "
        f"gap={result.knowledge_gap_type.value if result.knowledge_gap_type else None}"
    )
    return result.to_dict()
