from __future__ import annotations

from fastapi import APIRouter, Depends

from finance_analytics.core.deps import get_current_user
from finance_analytics.schemas import UserOut


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
def read_me(current_user = Depends(get_current_user)):
    return current_user
