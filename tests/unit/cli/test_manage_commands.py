import pytest

import manage
from intune.database.db_manager import Music, User, db


@pytest.mark.unit
def test_create_admin_creates_and_promotes(app, factories, capsys):
    factories.UserFactory(email="promote@intune.test")

    assert manage.create_admin(app, "Promote@intune.test", "new-password") == 0
    assert manage.create_admin(app, "fresh@intune.test", "another-pass") == 0

    promoted = User.query.filter_by(email="promote@intune.test").one()
    fresh = User.query.filter_by(email="fresh@intune.test").one()
    assert promoted.is_admin and promoted.check_password("new-password")
    assert fresh.is_admin
    assert "Admin account ready" in capsys.readouterr().out


@pytest.mark.unit
def test_create_admin_rejects_short_password(app, db_session):
    assert manage.create_admin(app, "x@intune.test", "short") == 1
    assert User.query.count() == 0


@pytest.mark.unit
def test_update_urls_command(app, factories, capsys):
    music = factories.MusicFactory(file_url="http://old.example.com/uploads/z.mp3")

    assert manage.update_urls(app) == 0

    db.session.expire_all()
    assert db.session.get(Music, music.id).file_url == "http://new.example.com/uploads/z.mp3"
    assert "updated 1" in capsys.readouterr().out


@pytest.mark.unit
def test_main_without_command_prints_usage(capsys):
    assert manage.main(["manage.py"]) == 1
    assert "Usage" in capsys.readouterr().out
