from fastapi import APIRouter, Depends

from livecast.api.v1.dependency import CurrentCaller, get_recording_materializer
from livecast.api.v1.schemas.base import ApiOut
from livecast.api.v1.schemas.recording import DeleteRecordingIn, RecordingOut
from livecast.domain.live.recording.recording_materializer import RecordingMaterializer

router = APIRouter(prefix="/recording", tags=["Recording"])


@router.post("/delete_recording")
async def delete_recording(
    body: DeleteRecordingIn,
    caller: CurrentCaller,
    materializer: RecordingMaterializer = Depends(get_recording_materializer),
) -> ApiOut[RecordingOut]:
    """Soft-delete a recording owned by the caller (admins may delete any)."""
    recording = await materializer.soft_delete_recording(
        body.recording_id, caller.user_id, is_admin=caller.is_admin
    )

    return ApiOut[RecordingOut](results=RecordingOut.model_validate(recording.model_dump()))
