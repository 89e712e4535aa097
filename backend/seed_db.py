"""
RestoHire Database Seeder

Creates demo accounts and data:
- A restaurant owner (Maria Lopez) with two active jobs
- Two workers, one of whom has already applied
- Onboarding training modules for workers, one gated behind another
"""

import sys
sys.path.insert(0, ".")

from datetime import datetime, timedelta

from restohire.db.session import SessionLocal, engine
from restohire.db.base import Base
from restohire.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    MaterialType,
    Restaurant,
    Role,
    TrainingMaterial,
    TrainingModule,
    User,
    WorkerProfile,
)
from restohire.core.security import get_password_hash


def seed_database():
    """Seed the database with demo data."""

    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        # Check if already seeded
        existing_owner = db.query(User).filter(User.email == "owner@restohire.com").first()
        if existing_owner:
            print("Database already seeded. Skipping...")
            return

        print("Seeding database...")
        now = datetime.utcnow()

        # 1. Restaurant owner and restaurant
        owner = User(
            email="owner@restohire.com",
            hashed_password=get_password_hash("owner123"),
            name="Maria Lopez",
            role=Role.RESTAURANT_OWNER,
        )
        db.add(owner)
        db.flush()

        restaurant = Restaurant(
            owner_id=owner.id,
            name="Casa Lopez",
            description="Family-run Mexican kitchen",
            address="12 Market Street",
            city="Austin",
            state="TX",
            zip_code="78701",
            business_type="Full service",
            cuisine_type="Mexican",
        )
        db.add(restaurant)
        db.flush()

        # 2. Jobs
        line_cook = Job(
            restaurant_id=restaurant.id,
            title="Line Cook",
            description="Weekend line cook for a busy brunch service.",
            requirements="1+ year of line experience",
            hourly_rate=19.5,
            start_date=now + timedelta(days=3),
            end_date=now + timedelta(days=60),
            max_workers=2,
            status=JobStatus.ACTIVE,
        )
        server = Job(
            restaurant_id=restaurant.id,
            title="Server",
            description="Evening server, Thursday to Saturday.",
            hourly_rate=15.0,
            start_date=now + timedelta(days=7),
            end_date=now + timedelta(days=90),
            status=JobStatus.ACTIVE,
        )
        db.add_all([line_cook, server])
        db.flush()

        # 3. Workers
        alex_user = User(
            email="alex.kim@example.com",
            hashed_password=get_password_hash("worker123"),
            name="Alex Kim",
            role=Role.WORKER,
        )
        sam_user = User(
            email="sam.patel@example.com",
            hashed_password=get_password_hash("worker123"),
            name="Sam Patel",
            role=Role.WORKER,
        )
        db.add_all([alex_user, sam_user])
        db.flush()

        alex = WorkerProfile(
            user_id=alex_user.id,
            title="Line Cook",
            bio="Four years on the grill station.",
            skills=["Grill", "Prep", "Food Safety"],
            hourly_rate=20.0,
            availability="Weekends",
            years_of_experience=4,
            city="Austin",
            state="TX",
        )
        sam = WorkerProfile(user_id=sam_user.id, skills=[])
        db.add_all([alex, sam])
        db.flush()

        # 4. Alex applied to the line cook job
        db.add(Application(
            job_id=line_cook.id,
            worker_id=alex.id,
            restaurant_id=restaurant.id,
            status=ApplicationStatus.PENDING,
            message="Available every weekend this season.",
        ))

        # 5. Worker onboarding modules
        basics = TrainingModule(
            title="Food Safety Basics",
            description="Handling, storage and allergens.",
            target_role=Role.WORKER,
            is_required=True,
            order=1,
        )
        service = TrainingModule(
            title="Front of House Service",
            description="Greeting guests and taking orders.",
            target_role=Role.WORKER,
            is_required=False,
            order=2,
        )
        service.prerequisites.append(basics)
        db.add_all([basics, service])
        db.flush()

        db.add_all([
            TrainingMaterial(
                module_id=basics.id,
                title="Safe temperatures",
                type=MaterialType.VIDEO,
                content_url="https://example.com/videos/temperatures",
                order=1,
                estimated_time_minutes=10,
            ),
            TrainingMaterial(
                module_id=basics.id,
                title="Allergen checklist",
                type=MaterialType.DOCUMENT,
                content_url="https://example.com/docs/allergens.pdf",
                order=2,
                estimated_time_minutes=5,
            ),
            TrainingMaterial(
                module_id=basics.id,
                title="Food safety quiz",
                type=MaterialType.QUIZ,
                order=3,
                estimated_time_minutes=10,
            ),
            TrainingMaterial(
                module_id=service.id,
                title="Greeting a table",
                type=MaterialType.VIDEO,
                content_url="https://example.com/videos/greeting",
                order=1,
                estimated_time_minutes=8,
            ),
        ])

        # Commit all changes
        db.commit()

        print("✅ Database seeded successfully!")
        print("\n📋 Created Users:")
        print("   - owner@restohire.com (password: owner123) [RESTAURANT_OWNER]")
        print("   - alex.kim@example.com (password: worker123) [WORKER, applied to Line Cook]")
        print("   - sam.patel@example.com (password: worker123) [WORKER]")
        print("\n🎓 Training: 'Front of House Service' requires 'Food Safety Basics'")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
