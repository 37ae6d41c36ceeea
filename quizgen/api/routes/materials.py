from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from quizgen.db.repositories.material_repo import MaterialRepository
from quizgen.db.session import get_db
from quizgen.schemas.quiz_schema import MaterialListResponse, MaterialView

router = APIRouter(prefix="/api", tags=["materials"])
material_repo = MaterialRepository()


def get_material_repo() -> MaterialRepository:
    return material_repo


@router.get(
    "/materials",
    response_model=MaterialListResponse,
    summary="Look up a material's title and content",
)
def get_material(
    material_id: int = Query(..., alias="materialId"),
    db: Session = Depends(get_db),
    repo: MaterialRepository = Depends(get_material_repo),
) -> MaterialListResponse:
    row = repo.get_by_id(db, material_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Material not found", "details": f"material {material_id} does not exist"},
        )
    return MaterialListResponse(materials=[MaterialView(**row)])
