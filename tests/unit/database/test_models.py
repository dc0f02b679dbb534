import uuid

import pytest

from intune.database.db_manager import Category, CategoryType, Music, db, new_object_id, parse_object_id


@pytest.mark.unit
def test_new_object_id_is_hex():
    value = new_object_id()
    assert len(value) == 32
    assert parse_object_id(value) == value


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "   ", "abc", 123, "zzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzz"])
def test_parse_object_id_rejects_malformed(value):
    assert parse_object_id(value) is None


@pytest.mark.unit
def test_parse_object_id_canonicalizes():
    raw = uuid.uuid4()
    assert parse_object_id(str(raw).upper()) == raw.hex


@pytest.mark.unit
def test_music_to_dict_uses_wire_keys(factories):
    music = factories.MusicFactory(title="Rain", description="Drops")
    data = music.to_dict()

    assert set(data) == {
        "_id", "title", "artist", "category", "categoryType", "duration", "releaseDate",
        "description", "fileUrl", "thumbnailUrl", "user", "createdAt", "updatedAt",
    }
    assert data["_id"] == music.id
    assert data["releaseDate"] == "2024-01-01"
    assert data["user"] == music.user_id


@pytest.mark.unit
def test_category_types_cascade_on_delete(factories):
    category = factories.CategoryFactory()
    factories.CategoryTypeFactory(category=category)

    db.session.delete(category)
    db.session.commit()

    assert Category.query.count() == 0
    assert CategoryType.query.count() == 0


@pytest.mark.unit
def test_find_type(factories):
    first = factories.CategoryTypeFactory()
    category = first.category

    assert category.find_type(first.id) is first
    assert category.find_type(uuid.uuid4().hex) is None
    assert category.find_type(None) is None


@pytest.mark.unit
def test_user_password_roundtrip(factories):
    user = factories.UserFactory(password="s3cret-pass")
    assert user.check_password("s3cret-pass")
    assert not user.check_password("other")
    assert "password_hash" not in user.to_dict()


@pytest.mark.unit
def test_initialize_database_creates_sqlite_directory(tmp_path, app_overrides):
    import app as app_module

    db_file = tmp_path / "nested" / "dir" / "music.sqlite"
    app_overrides["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_file.as_posix()}"
    application = app_module.create_app(app_overrides)

    with application.app_context():
        assert Music.query.count() == 0
    assert db_file.parent.is_dir()
