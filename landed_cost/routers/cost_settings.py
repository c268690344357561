from __future__ import annotations

import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from landed_cost.core.deps import get_db_session
from landed_cost.core.logging import get_logger
from landed_cost.models.cost_setting import CostSetting
from landed_cost.models.enums import CostSettingType
from landed_cost.repositories.cost_repo import CostSettingRepository
from landed_cost.schemas.cost import CostSettingCreate, CostSettingRead, CostSettingUpdate
from landed_cost.services.extra_costs import (
    DEFAULT_CONFIGS,
    DEFAULT_CURRENCIES,
    DEFAULT_NAMES,
    dump_config,
    parse_config,
)

router = APIRouter(prefix="/cost-settings", tags=["costs"])
logger = get_logger(__name__)


async def _get_setting(repo: CostSettingRepository, setting_id: uuid.UUID) -> CostSetting:
    setting = await repo.get(setting_id)
    if not setting:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cost setting not found")
    return setting


@router.get("", response_model=list[CostSettingRead])
async def list_cost_settings(active_only: bool = False, session=Depends(get_db_session)):
    return await CostSettingRepository(session).list(active_only=active_only)


@router.post("", response_model=CostSettingRead, status_code=status.HTTP_201_CREATED)
async def create_cost_setting(payload: CostSettingCreate, session=Depends(get_db_session)):
    repo = CostSettingRepository(session)
    if await repo.get_by_type(payload.type):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cost setting for this type already exists")
    try:
        return await repo.create(CostSetting(**payload.model_dump()))
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cost setting for this type already exists")


@router.post("/seed", response_model=list[CostSettingRead])
async def seed_cost_settings(session=Depends(get_db_session)):
    """Create the missing inland/domestic/3PL settings with default prices; existing rows are left alone."""
    repo = CostSettingRepository(session)
    for setting_type in CostSettingType:
        if await repo.get_by_type(setting_type):
            continue
        await repo.create(
            CostSetting(
                type=setting_type,
                name=DEFAULT_NAMES[setting_type],
                currency=DEFAULT_CURRENCIES[setting_type],
                config=dict(DEFAULT_CONFIGS[setting_type]),
                is_active=True,
            )
        )
        logger.info("cost_setting_seeded", type=setting_type.value)
    return await repo.list()


@router.get("/{setting_id}", response_model=CostSettingRead)
async def get_cost_setting(setting_id: uuid.UUID, session=Depends(get_db_session)):
    return await _get_setting(CostSettingRepository(session), setting_id)


@router.patch("/{setting_id}", response_model=CostSettingRead)
async def update_cost_setting(setting_id: uuid.UUID, payload: CostSettingUpdate, session=Depends(get_db_session)):
    repo = CostSettingRepository(session)
    setting = await _get_setting(repo, setting_id)
    changes = payload.changes()
    if "config" in changes:
        try:
            changes["config"] = dump_config(parse_config(setting.type, changes["config"]))
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    for key, value in changes.items():
        setattr(setting, key, value)
    return await repo.update(setting)


@router.delete("/{setting_id}")
async def delete_cost_setting(setting_id: uuid.UUID, session=Depends(get_db_session)):
    repo = CostSettingRepository(session)
    setting = await _get_setting(repo, setting_id)
    await repo.delete(setting)
    return {"status": "ok"}
