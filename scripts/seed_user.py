"""Seed a verified demo user that can log in immediately."""

from app import create_app
from models import db
from models.user import User, default_avatar_url

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "DemoPass1!"


def main() -> None:
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(email=DEMO_EMAIL).first()
        if user is None:
            user = User(
                email=DEMO_EMAIL,
                subscription="starter",
                avatar_url=default_avatar_url(DEMO_EMAIL),
            )
            db.session.add(user)
            action = "created"
        else:
            user.token = None
            action = "updated"
        user.set_password(DEMO_PASSWORD)
        user.mark_verified()
        db.session.commit()
        print(f"Demo user {action}: {DEMO_EMAIL}")


if __name__ == "__main__":
    main()
