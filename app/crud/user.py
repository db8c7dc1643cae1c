# app/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import User
from typing import Any, Dict

async def update_user_fields(user: User, fields: Dict[str, Any], db: AsyncSession) -> User:
    for field, value in fields.items():
        setattr(user, field, value)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
