"""Music metadata CRUD, media upload and URL migration endpoints."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from intune.auth import admin_required
from intune.database.db_manager import db
from intune.domain.music import MusicError, MusicService, MusicUpdate, UrlMigrator


logger = logging.getLogger(__name__)

music_bp = Blueprint('music_bp', __name__, url_prefix='/api/music')


def get_music_service() -> MusicService:
    return current_app.extensions['music_service']


def get_url_migrator() -> UrlMigrator:
    return current_app.extensions['url_migrator']


def _payload():
    """Form fields for multipart/urlencoded bodies, else the JSON object."""
    if request.form:
        return request.form
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _uploaded(field: str):
    upload = request.files.get(field)
    return upload if upload and upload.filename else None


def _error(exc: MusicError, **extra):
    body = exc.to_dict()
    body.update(extra)
    return jsonify(body), exc.status_code


def _server_error(exc: Exception, context: str, **extra):
    db.session.rollback()
    logger.exception("Error in %s", context)
    body = {'message': 'Server Error', 'error': str(exc)}
    body.update(extra)
    return jsonify(body), 500


@music_bp.route('', methods=['GET'])
def list_music():
    try:
        return jsonify(get_music_service().list_music()), 200
    except MusicError as exc:
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'list_music')


@music_bp.route('/category/<category_id>', methods=['GET'])
def list_music_by_category(category_id: str):
    try:
        return jsonify(get_music_service().list_music(category_id)), 200
    except MusicError as exc:
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'list_music_by_category')


@music_bp.route('/<music_id>', methods=['GET'])
def get_music(music_id: str):
    try:
        return jsonify(get_music_service().get_music(music_id)), 200
    except MusicError as exc:
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'get_music')


@music_bp.route('/create', methods=['POST'])
@admin_required
def create_music():
    payload, audio, thumbnail = _payload(), _uploaded('file'), _uploaded('thumbnail')
    try:
        music = get_music_service().create_music(payload, audio, thumbnail, user_id=current_user.id)
        return jsonify(music), 201
    except MusicError as exc:
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'create_music')


@music_bp.route('/<music_id>', methods=['PUT'])
@admin_required
def update_music(music_id: str):
    changes = MusicUpdate.from_mapping(_payload())
    audio, thumbnail = _uploaded('file'), _uploaded('thumbnail')
    try:
        music = get_music_service().update_music(music_id, changes, audio=audio, thumbnail=thumbnail)
        return jsonify(music), 200
    except MusicError as exc:
        db.session.rollback()
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'update_music')


@music_bp.route('/<music_id>', methods=['DELETE'])
@admin_required
def delete_music(music_id: str):
    try:
        cleanup = get_music_service().delete_music(music_id)
        return jsonify({'message': 'Music deleted successfully', 'cleanup': cleanup}), 200
    except MusicError as exc:
        return _error(exc)
    except Exception as exc:
        return _server_error(exc, 'delete_music')


@music_bp.route('/upload', methods=['POST'])
@admin_required
def upload_file():
    audio, thumbnail = _uploaded('file'), _uploaded('thumbnail')
    try:
        stored = get_music_service().upload_asset(audio, thumbnail)
    except MusicError as exc:
        return _error(exc, success=False)
    except Exception as exc:
        return _server_error(exc, 'upload_file', success=False)
    body = {'success': True, 'message': 'File uploaded successfully'}
    body.update(stored.to_dict())
    return jsonify(body), 200


@music_bp.route('/update-urls', methods=['POST'])
@admin_required
def update_database_urls():
    # Old/new hosts come from startup configuration, never from the request
    try:
        report = get_url_migrator().run()
    except MusicError as exc:
        return _error(exc, success=False)
    except Exception as exc:
        return _server_error(exc, 'update_database_urls', success=False, message='Error updating database URLs')

    if report.total_found == 0:
        message = 'No records found with old server URLs. Database is already up to date!'
    else:
        message = f'Successfully updated {report.updated_count} records'
    body = {'success': True, 'message': message}
    body.update(report.to_dict())
    return jsonify(body), 200


__all__ = ['music_bp']
