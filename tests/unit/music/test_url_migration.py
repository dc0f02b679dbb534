import pytest

from intune.database.db_manager import Music, db
from intune.domain.music import UrlMigrationConfig, UrlMigrator, ValidationError

OLD = "http://old.example.com"
NEW = "https://media.example.org"


def _migrator(old=OLD, new=NEW):
    return UrlMigrator(UrlMigrationConfig(old_base_url=old, new_base_url=new))


@pytest.mark.unit
def test_rewrites_file_and_thumbnail_urls(factories):
    music = factories.MusicFactory(
        file_url=f"{OLD}/uploads/a.mp3",
        thumbnail_url=f"{OLD}/uploads/a.jpg",
    )
    untouched = factories.MusicFactory(file_url="/uploads/b.mp3")

    report = _migrator().run()

    assert report.to_dict() == {"totalFound": 1, "updatedCount": 1}
    db.session.refresh(music)
    assert music.file_url == f"{NEW}/uploads/a.mp3"
    assert music.thumbnail_url == f"{NEW}/uploads/a.jpg"
    assert db.session.get(Music, untouched.id).file_url == "/uploads/b.mp3"


@pytest.mark.unit
def test_second_run_finds_nothing(factories):
    factories.MusicFactory(file_url=f"{OLD}/uploads/a.mp3")

    first = _migrator().run()
    second = _migrator().run()

    assert first.updated_count == 1
    assert second.total_found == 0
    assert second.updated_count == 0


@pytest.mark.unit
def test_only_one_field_matching(factories):
    music = factories.MusicFactory(file_url="/uploads/a.mp3", thumbnail_url=f"{OLD}/uploads/a.png")

    report = _migrator().run()

    assert report.updated_count == 1
    db.session.refresh(music)
    assert music.file_url == "/uploads/a.mp3"
    assert music.thumbnail_url == f"{NEW}/uploads/a.png"


@pytest.mark.unit
def test_hostname_match_without_exact_prefix_is_counted_but_unchanged(factories):
    # Host matches but scheme differs, so the literal old base is absent
    music = factories.MusicFactory(file_url="https://old.example.com/uploads/a.mp3")

    report = _migrator().run()

    assert report.total_found == 1
    assert report.updated_count == 0
    db.session.refresh(music)
    assert music.file_url == "https://old.example.com/uploads/a.mp3"


@pytest.mark.unit
@pytest.mark.parametrize(
    "old, new, message",
    [
        (None, NEW, "Missing configuration"),
        (OLD, None, "Missing configuration"),
        ("not a url", NEW, "Invalid OLD_BASE_URL"),
    ],
)
def test_configuration_errors(db_session, old, new, message):
    with pytest.raises(ValidationError) as excinfo:
        _migrator(old, new).run()
    assert message in excinfo.value.message


@pytest.mark.unit
def test_config_from_mapping_falls_back_to_production_url():
    config = UrlMigrationConfig.from_mapping(
        {"OLD_BASE_URL": OLD, "NEW_BASE_URL": "", "PRODUCTION_URL": NEW}
    )
    assert config == UrlMigrationConfig(old_base_url=OLD, new_base_url=NEW)

    empty = UrlMigrationConfig.from_mapping({})
    assert empty.old_base_url is None and empty.new_base_url is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "old, new",
    [
        ("http://old.example.com:5000", "http://old.example.com"),
        ("https://api.example.com/v1", "https://api.example.com"),
    ],
)
def test_new_base_that_prefixes_old_base_is_migrated(factories, old, new):
    music = factories.MusicFactory(file_url=f"{old}/uploads/a.mp3", thumbnail_url=f"{old}/uploads/a.jpg")

    report = _migrator(old, new).run()

    assert report.updated_count == 1
    db.session.refresh(music)
    assert music.file_url == f"{new}/uploads/a.mp3"
    assert music.thumbnail_url == f"{new}/uploads/a.jpg"
    assert _migrator(old, new).run().updated_count == 0


@pytest.mark.unit
def test_new_base_extending_old_base_is_not_applied_twice(factories):
    old, new = "http://old.example.com", "http://old.example.com/media"
    music = factories.MusicFactory(file_url=f"{old}/uploads/a.mp3")

    assert _migrator(old, new).run().updated_count == 1
    assert _migrator(old, new).run().updated_count == 0

    db.session.refresh(music)
    assert music.file_url == f"{new}/uploads/a.mp3"
