import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from auditionapi.database.connection import SessionLocal, engine
from auditionapi.models import Base
from auditionapi.repositories.check_in_repository import CheckInRepository

# consecutive_days -> (diamonds, xp)
DEFAULT_MILESTONE_REWARDS = {
    7: (20, 50),
    14: (50, 100),
    30: (150, 300),
}


def init_db(seed: bool = True):
    """Create all tables and seed the milestone reward configuration"""
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Tables created on {engine.url.render_as_string(hide_password=True)}")

        if seed:
            with SessionLocal() as db, db.begin():
                repo = CheckInRepository(db)
                for days, (diamonds, xp) in DEFAULT_MILESTONE_REWARDS.items():
                    repo.upsert_reward_config(days, diamonds, xp)
            print(f"Seeded {len(DEFAULT_MILESTONE_REWARDS)} milestone rewards")

    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db(seed="--no-seed" not in sys.argv)
