#!/usr/bin/env python3
"""
Standalone script to create a superuser for the Wholecoin API
Usage: python create_superuser.py
"""

import asyncio
import logging
from app.core.database import AsyncSessionLocal, create_db_and_tables, engine
from app.core.auth import User, UserManager, UserCreate
from app.models import goal, notification, transaction  # noqa: F401  mapped before first use
from fastapi_users.db import SQLAlchemyUserDatabase

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def create_superuser():
    logger.info("Creating superuser...")

    email = input("Enter superuser email: ") or "admin@example.com"
    password = input("Enter superuser password: ") or "admin123"
    full_name = input("Enter full name (optional): ") or "System Administrator"
    wallet_address = input("Enter Solana wallet address (optional): ") or None

    await create_db_and_tables()
    try:
        async with AsyncSessionLocal() as session:
            user_manager = UserManager(SQLAlchemyUserDatabase(session, User))

            existing_user = await user_manager.user_db.get_by_email(email)
            if existing_user:
                logger.warning(f"User with email {email} already exists")
                return

            superuser = await user_manager.create(UserCreate(
                email=email,
                password=password,
                full_name=full_name,
                wallet_address=wallet_address,
                is_superuser=True,
                is_verified=True
            ))
            logger.info(f"Superuser created: {superuser.email} (id={superuser.id}, wallet={superuser.wallet_address})")
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_superuser())
