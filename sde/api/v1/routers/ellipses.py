"""
API router for standard deviational ellipse endpoints.
"""
from fastapi import APIRouter, HTTPException, Request
from shapely.geometry import mapping

from sde.api.dependencies import EllipseServiceDep, limiter
from sde.api.v1.models.requests import EllipseRequest
from sde.api.v1.models.responses import (
    EllipseFeatureModel,
    EllipseProperties,
    EllipsesResponse,
)
from sde.config import settings
from sde.domain.exceptions import (
    InsufficientDataError,
    InvalidFieldError,
    MissingInputError,
)


router = APIRouter(
    prefix="/ellipses",
    tags=["ellipses"],
)


@router.post(
    "",
    response_model=EllipsesResponse,
    summary="Compute standard deviational ellipses",
    description="""
    Summarize the central tendency, dispersion and directional trend of a set
    of point features with standard deviational ellipses.

    This endpoint:
    1. Reads point locations (centroids for non-point geometries)
    2. Optionally weights points by `weight_field` and splits them by `case_field`
    3. Computes the weighted mean centre and moment matrix of each group
    4. Returns one ellipse polygon per group, scaled by 1, 2 or 3 standard deviations

    Coordinates are treated as planar; no geodetic correction is applied.
    """,
    responses={
        200: {"description": "Ellipses computed (possibly with warnings)"},
        400: {"description": "Missing input features or unknown weight/case field"},
        422: {"description": "Invalid request body, or no group has enough data"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Internal server error"},
    }
)
@limiter.limit(f"{settings.rate_limit_requests}/minute")
def compute_ellipses(
    request: Request,
    body: EllipseRequest,
    ellipse_service: EllipseServiceDep,
) -> EllipsesResponse:
    """
    Compute standard deviational ellipses for the posted features.

    Args:
        request: Incoming request (used for rate limiting)
        body: Features and computation parameters
        ellipse_service: Ellipse service (injected dependency)

    Returns:
        EllipsesResponse with one feature per valid group

    Raises:
        HTTPException: If the input is missing, a field is unknown or no group is valid
    """
    try:
        # Delegate to service layer (no business logic here)
        result = ellipse_service.compute(
            body.features,
            ellipse_size=body.ellipse_size,
            weight_field=body.weight_field,
            case_field=body.case_field,
        )

    except (MissingInputError, InvalidFieldError) as e:
        raise HTTPException(status_code=400, detail=e.message)

    except InsufficientDataError as e:
        raise HTTPException(status_code=422, detail=e.message)

    # Transform to response model
    return EllipsesResponse(
        status=result.status.value,
        ellipse_count=len(result.features),
        features=[
            EllipseFeatureModel(
                geometry=mapping(feature.geometry),
                properties=EllipseProperties(**feature.attributes),
            )
            for feature in result.features
        ],
        warnings=[issue.message for issue in result.issues],
    )
