from fastapi import APIRouter

from washbook.api.v1.schemas import PlateFormatSchema, PlateRequestSchema, PlateValidationSchema
from washbook.application.utils.plate import format_plate_input, split_plate, validate_plate

router = APIRouter()


@router.post("/validate", response_model=PlateValidationSchema)
def validate(req: PlateRequestSchema):
    result = validate_plate(req.plate)
    return PlateValidationSchema(
        normalized=result.normalized,
        valid=result.valid,
        error_message=result.error_message,
        parts=list(split_plate(result.normalized)) if result.valid else None,
    )


@router.post("/format", response_model=PlateFormatSchema)
def format_input(req: PlateRequestSchema):
    return PlateFormatSchema(formatted=format_plate_input(req.plate))
