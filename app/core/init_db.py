import asyncio
import logging

from sqlalchemy import select, func
from app.core.config import DEFAULT_CENTERS, ENVIRONMENT
from app.core.database import async_session, db_manager, db_operation, engine, Base
from app.core.exceptions import DatabaseError, ConfigurationError

# Register every table on Base.metadata
import app.admin.models  # noqa: F401
import app.students.models  # noqa: F401
from app.admin.models.centers import Center

logger = logging.getLogger(__name__)


@db_operation
async def create_default_centers():
    """Create the institute's centers on an empty database"""
    async with async_session() as session:
        try:
            result = await session.execute(select(Center.name))
            existing = set(result.scalars().all())

            if existing:
                logger.info(f"Centers already exist ({len(existing)} found), skipping creation")
                return

            logger.info("Creating default centers...")
            for name in DEFAULT_CENTERS:
                session.add(Center(name=name))
            await session.commit()
            logger.info(f"Default centers created: {', '.join(DEFAULT_CENTERS)}")

        except Exception as e:
            logger.error(f"Failed to create default centers: {e}")
            await session.rollback()
            raise DatabaseError(f"Failed to create default centers: {str(e)}")


async def init_database():
    """Initialize database with tables and initial data"""
    try:
        logger.info("Starting database initialization...")

        await db_manager.check_connection()
        logger.info("✅ Database connection verified")

        await db_manager.create_tables()
        logger.info("✅ Database tables created/verified")

        await create_default_centers()
        logger.info("✅ Initial data created/verified")

        logger.info("🎉 Database initialization completed successfully")

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during database initialization: {e}")
        raise DatabaseError(f"Database initialization failed: {str(e)}")


async def verify_database_setup():
    """Verify that database is properly set up"""
    try:
        logger.info("Verifying database setup...")

        async with async_session() as session:
            result = await session.execute(select(func.count(Center.id)))
            count = result.scalar()

            if not count:
                raise DatabaseError("No centers found")

            logger.info(f"✅ Database verification passed: {count} centers found")
            return True

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        raise DatabaseError(f"Database verification failed: {str(e)}")


async def reset_database():
    """Reset database (for development/testing only)"""
    if ENVIRONMENT not in ["development", "dev", "test"]:
        raise ConfigurationError(
            "ENVIRONMENT",
            "Database reset is only allowed in development or test environments",
        )

    try:
        logger.warning("🚨 RESETTING DATABASE - ALL DATA WILL BE LOST!")

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("✅ All tables dropped")

        await init_database()
        logger.info("✅ Database reset completed")

    except Exception as e:
        logger.error(f"Database reset failed: {e}")
        raise DatabaseError(f"Database reset failed: {str(e)}")


if __name__ == "__main__":
    import sys

    async def main():
        command = sys.argv[1] if len(sys.argv) > 1 else "init"

        if command == "init":
            await init_database()
        elif command == "verify":
            await verify_database_setup()
        elif command == "reset":
            await reset_database()
        else:
            print(f"Unknown command: {command}")
            print("Available commands: init, verify, reset")
            sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Database initialization cancelled by user")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
