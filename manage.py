# manage.py
import sys

from app import create_app
from intune.database.db_manager import User, db
from intune.domain.music import MusicError

USAGE = (
    "Usage:\n"
    "  python manage.py create_db\n"
    "  python manage.py create_admin <email> <password>\n"
    "  python manage.py update_urls"
)


def create_db(app):
    """Creates the database tables (also done on every app start)."""
    with app.app_context():
        db.create_all()
        print(f"Database ready at {app.config['SQLALCHEMY_DATABASE_URI']}")
    return 0


def create_admin(app, email, password):
    """Create an admin account, or promote an existing one."""
    email = (email or "").strip().lower()
    if not email or len(password or "") < 8:
        print("An email and a password of at least 8 characters are required.")
        return 1
    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=email.split("@")[0])
            db.session.add(user)
        user.set_password(password)
        user.is_admin = True
        db.session.commit()
        print(f"Admin account ready: {email}")
    return 0


def update_urls(app):
    """Run the URL migration with OLD_BASE_URL / NEW_BASE_URL from the environment."""
    with app.app_context():
        try:
            report = app.extensions['url_migrator'].run()
        except MusicError as exc:
            print(exc.message)
            return 1
    print(f"Found {report.total_found} records, updated {report.updated_count}")
    return 0


def main(argv):
    if len(argv) < 2:
        print("No command provided.")
        print(USAGE)
        return 1
    command, args = argv[1], argv[2:]
    app = create_app()
    if command == 'create_db':
        return create_db(app)
    if command == 'create_admin' and len(args) == 2:
        return create_admin(app, *args)
    if command == 'update_urls':
        return update_urls(app)
    print(f"Unknown command: {command}")
    print(USAGE)
    return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv))
