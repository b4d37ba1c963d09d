"""
Registry endpoints for API v1.

* ``GET /registry?status=done`` lists the board (see
  ``RegistryService.list_entries`` for the filter rules).
* ``POST /registry`` registers a customer for today.
* ``PATCH /registry`` applies an ``action`` (``hold`` or
  ``createBill``) to the entry identified by ``id`` and ``date``.
* ``DELETE /registry`` removes an entry and its bill.
* ``GET /registry/{date}/{id}/receipt`` renders a printable receipt.

All routes require an unlocked device.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse

from registry_pos_api.app.api.deps import get_registry_service
from registry_pos_api.app.core.errors import InvalidArgument
from registry_pos_api.app.core.security import require_device
from registry_pos_api.app.schemas.registry import (
    EntryAction,
    RegistryDeleteResult,
    RegistryEntryCreate,
    RegistryEntryKey,
    RegistryEntryRead,
    RegistryEntryUpdate,
)
from registry_pos_api.app.services.receipt_service import ReceiptService
from registry_pos_api.app.services.registry_service import RegistryService

router = APIRouter(dependencies=[Depends(require_device)])


@router.get("", response_model=List[RegistryEntryRead])
async def list_entries(
    status_filter: Optional[str] = Query(None, alias="status"),
    service: RegistryService = Depends(get_registry_service),
) -> List[RegistryEntryRead]:
    """List entries.

    - **status=done**: every done entry plus all entries of the latest day.
    - anything else: unfinished entries of the latest day.
    """
    return await service.list_entries(status_filter)


@router.post("", response_model=RegistryEntryRead, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_in: RegistryEntryCreate,
    service: RegistryService = Depends(get_registry_service),
) -> RegistryEntryRead:
    """Register a customer for today with status ``pending``."""
    return await service.create_entry(entry_in.name, entry_in.number)


@router.patch("", response_model=RegistryEntryRead)
async def update_entry(
    body: RegistryEntryUpdate,
    service: RegistryService = Depends(get_registry_service),
) -> RegistryEntryRead:
    """Hold an entry or bill it, depending on ``action``."""
    if body.action == EntryAction.HOLD.value:
        return await service.hold_entry(body.id, body.date)
    if body.action == EntryAction.CREATE_BILL.value:
        return await service.create_bill(body.id, body.date, body.bill_items)
    raise InvalidArgument(f"Unknown action: {body.action}")


@router.delete("", response_model=RegistryDeleteResult)
async def delete_entry(
    body: RegistryEntryKey,
    service: RegistryService = Depends(get_registry_service),
) -> RegistryDeleteResult:
    """Delete an entry together with its bill items."""
    remaining = await service.delete_entry(body.id, body.date)
    return RegistryDeleteResult(
        message=f"Deleted entry id={body.id} on {body.date}.",
        entries=remaining,
    )


@router.get("/{date}/{entry_id}/receipt", response_class=HTMLResponse)
async def get_receipt(
    date: str,
    entry_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> HTMLResponse:
    """Render the receipt of one entry as printable HTML."""
    entry = await service.get_entry(entry_id, date)
    return HTMLResponse(ReceiptService.render(entry))
