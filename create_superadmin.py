import os
from app import app, db
from models.user import User

with app.app_context():
    db.create_all()
    existing = User.query.filter_by(role="superadmin").first()
    if existing:
        print(f"⚠️ Superadmin account already exists: {existing.username}")
    else:
        superadmin = User(
            username=os.getenv("SUPERADMIN_USERNAME", "superadmin"),
            email=os.getenv("SUPERADMIN_EMAIL", "superadmin@example.com"),
            phone="0123456789",
            role="superadmin"
        )
        superadmin.set_password(os.getenv("SUPERADMIN_PASSWORD", "superadmin123"))
        db.session.add(superadmin)
        db.session.commit()
        print("Superadmin account created successfully!")
