import logging

from fastapi import APIRouter, Depends, Request, Response, status

from app.jobs.dependencies import get_intake_service
from app.jobs.exceptions import InvalidSubmissionException, PatchSourceUnavailableException
from app.jobs.services import IntakeService

logger = logging.getLogger(__name__)

router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def submit_patch(
    request: Request,
    intake_service: IntakeService = Depends(get_intake_service),
):
    """
    Accepts a patch for asynchronous processing.
    200 means the worker took the job, not that the patch applied.
    """
    try:
        await intake_service.submit(request)
    except InvalidSubmissionException as e:
        logger.info(f"Rejected request: {e}")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)
    except PatchSourceUnavailableException as e:
        logger.error(f"Failed to open patch: {e}")
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(status_code=status.HTTP_200_OK)
